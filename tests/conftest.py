"""
Shared sample 3ddose inputs for the test suite.
"""

import pytest

from dose2gmsh import DoseBlock

# ──────────────────────────────────────────────────────────────
# Sample files
# ──────────────────────────────────────────────────────────────

# 2 x 1 x 1 voxels, no uncertainty section
TWO_VOXELS = """\
2 1 1
0 1 2
0 5
0 10
1.0 2.0
"""

# 2 x 2 x 2 voxels, evenly spaced, with uncertainties
CUBE = """\
2 2 2
-1.0 0.0 1.0
-1.0 0.0 1.0
0.0 2.0 4.0
0.1 0.2 0.3 0.4 0.5 0.6 0.7 0.8
0.01 0.02 0.03 0.04 0.05 0.06 0.07 0.08
"""

# 3 x 1 x 2 voxels, x unevenly spaced, with uncertainties
UNEVEN = """\
3 1 2
0.0 0.5 1.5 3.0
0.0 1.0
0.0 1.0 2.0
10.0 20.0 30.0 40.0 50.0 60.0
0.5 0.4 0.3 0.2 0.1 0.05
"""


@pytest.fixture
def two_voxels() -> DoseBlock:
    return DoseBlock([[0, 1, 2], [0, 5], [0, 10]], [1.0, 2.0])


@pytest.fixture
def cube() -> DoseBlock:
    return DoseBlock(
        [[-1.0, 0.0, 1.0], [-1.0, 0.0, 1.0], [0.0, 2.0, 4.0]],
        [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8],
        [0.01, 0.02, 0.03, 0.04, 0.05, 0.06, 0.07, 0.08],
    )


@pytest.fixture
def uneven() -> DoseBlock:
    return DoseBlock(
        [[0.0, 0.5, 1.5, 3.0], [0.0, 1.0], [0.0, 1.0, 2.0]],
        [10.0, 20.0, 30.0, 40.0, 50.0, 60.0],
        [0.5, 0.4, 0.3, 0.2, 0.1, 0.05],
    )


@pytest.fixture
def write_3ddose(tmp_path):
    """Write text to a .3ddose file in a temporary directory and return its path."""

    def _write(text: str, name: str = "phantom.3ddose") -> str:
        path = tmp_path / name
        path.write_text(text)
        return str(path)

    return _write
