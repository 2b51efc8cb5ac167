# -*- coding: utf-8 -*-

r"""

──────────────────────────────────────────────────────────────────────────────
DoseBlock
──────────────────────────────────────────────────────────────────────────────
Dose and uncertainty data for a 3D rectilinear hexahedral mesh, as written by
DOSXYZnrc (EGSnrc) in the 3ddose format.

Units follow the EGSnrc convention:
 - coordinates are centimetres
 - doses are dose per fluence in Gy·cm²
 - uncertainties are fractions of the corresponding dose

Voxels and nodes are both ordered x fastest, then y, then z.

            ------------
            |\         |\
 y          |  \       |  \
 ^          |   ------------
 |          |   |      |   |
 +---> x    ----+-------   |
  \          \  |       \  |
   z           \|         \|
                ------------

"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .errors import FormatError

AXES = ("x", "y", "z")


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).ravel()
    arr.setflags(write=False)
    return arr


class DoseBlock:
    """
    Immutable voxel grid of doses with optional per-voxel uncertainties.

    The backing arrays are read-only; construction validates every invariant
    and raises FormatError if one does not hold.
    """

    def __init__(
        self,
        boundaries: Sequence[Sequence[float]],
        doses: Sequence[float],
        errors: Optional[Sequence[float]] = None,
    ):
        if len(boundaries) != 3:
            raise FormatError(f"expected 3 boundary sequences, got {len(boundaries)}")

        self.boundaries: Tuple[np.ndarray, np.ndarray, np.ndarray] = tuple(
            _frozen(b) for b in boundaries
        )

        for axis, b in zip(AXES, self.boundaries):
            if len(b) < 2:
                raise FormatError(f"{axis}-boundaries need at least 2 values, got {len(b)}")
            if not np.all(np.diff(b) > 0):
                raise FormatError(f"{axis}-boundaries are not strictly increasing")

        self.voxel_counts: Tuple[int, int, int] = tuple(len(b) - 1 for b in self.boundaries)

        self.doses = _frozen(doses)
        if len(self.doses) != self.num_voxels:
            raise FormatError(
                f"expected {self.num_voxels} dose values for a "
                f"{'x'.join(map(str, self.voxel_counts))} grid, got {len(self.doses)}"
            )

        self.errors: Optional[np.ndarray] = None
        if errors is not None:
            self.errors = _frozen(errors)
            if len(self.errors) != len(self.doses):
                raise FormatError(
                    f"expected {len(self.doses)} uncertainty values, got {len(self.errors)}"
                )

    def __repr__(self) -> str:
        return (
            f"DoseBlock(voxel_counts={self.voxel_counts}, origin={self.origin}, "
            f"has_errors={self.has_errors})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, DoseBlock):
            return NotImplemented
        if self.has_errors != other.has_errors:
            return False
        same = all(np.array_equal(a, b) for a, b in zip(self.boundaries, other.boundaries))
        same = same and np.array_equal(self.doses, other.doses)
        if self.has_errors:
            same = same and np.array_equal(self.errors, other.errors)
        return same

    __hash__ = None

    # Grid shape

    @property
    def xs(self) -> np.ndarray:
        return self.boundaries[0]

    @property
    def ys(self) -> np.ndarray:
        return self.boundaries[1]

    @property
    def zs(self) -> np.ndarray:
        return self.boundaries[2]

    @property
    def num_x(self) -> int:
        return self.voxel_counts[0]

    @property
    def num_y(self) -> int:
        return self.voxel_counts[1]

    @property
    def num_z(self) -> int:
        return self.voxel_counts[2]

    @property
    def num_voxels(self) -> int:
        """Total number of voxels (mesh elements)."""
        return self.num_x * self.num_y * self.num_z

    @property
    def num_nodes(self) -> int:
        """Total number of voxel corners (mesh nodes)."""
        return len(self.xs) * len(self.ys) * len(self.zs)

    @property
    def origin(self) -> Tuple[float, float, float]:
        return (float(self.xs[0]), float(self.ys[0]), float(self.zs[0]))

    @property
    def has_errors(self) -> bool:
        return self.errors is not None

    def grid_index(self, i: int, j: int, k: int) -> int:
        """0-based index of node (i, j, k)."""
        return i + len(self.xs) * j + len(self.xs) * len(self.ys) * k

    def voxel_index(self, i: int, j: int, k: int) -> int:
        """0-based index of voxel (i, j, k) into ``doses``."""
        return i + self.num_x * j + self.num_x * self.num_y * k

    def centers(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Voxel midpoints along each axis."""
        return tuple(0.5 * (b[:-1] + b[1:]) for b in self.boundaries)

    def dose_grid(self) -> np.ndarray:
        """Doses as an (nx, ny, nz) array."""
        return self.doses.reshape(self.voxel_counts, order="F")

    def extent(self) -> Tuple[Tuple[float, float], ...]:
        return tuple((float(b[0]), float(b[-1])) for b in self.boundaries)

    def summary(self) -> Dict[str, object]:
        """
        Short description of the grid, used by ``--info``.
        """
        info: Dict[str, object] = {
            "voxel_counts": self.voxel_counts,
            "num_voxels": self.num_voxels,
            "num_nodes": self.num_nodes,
            "extent_cm": self.extent(),
            "dose_min": float(self.doses.min()),
            "dose_max": float(self.doses.max()),
            "has_uncertainty": self.has_errors,
        }
        if self.has_errors:
            info["uncertainty_max"] = float(self.errors.max())
        return info
