"""
Unit tests for dose2gmsh package import.

These tests verify that:
1. The package can be imported without errors
2. The package exposes version metadata
3. The public names are importable from the package root
4. Every module compiles without warnings (e.g. invalid escapes in docstrings)

"""

import glob
import os
import warnings

# ──────────────────────────────────────────────────────────────
# Tests
# ──────────────────────────────────────────────────────────────

def test_import_and_version():
    """Ensure the package loads and __version__ attribute exists."""
    import dose2gmsh
    assert hasattr(dose2gmsh, "__version__")
    assert isinstance(dose2gmsh.__version__, str)


def test_public_api():
    """The parser, encoders and errors are re-exported at the top level."""
    import dose2gmsh
    for name in ("DoseBlock", "parse", "read_3ddose", "encode", "OutputFormat",
                 "FormatError", "NumericParseError", "EncodingError", "IoError"):
        assert hasattr(dose2gmsh, name), name


def test_sources_compile_without_warnings():
    """Compile every module with warnings turned into errors."""
    import dose2gmsh
    package_dir = os.path.dirname(dose2gmsh.__file__)
    paths = sorted(glob.glob(os.path.join(package_dir, "*.py")))
    assert paths

    for path in paths:
        with open(path, encoding="utf-8") as fh:
            source = fh.read()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, path, "exec")
