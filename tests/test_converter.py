"""
Unit tests for the dose2gmsh converter.

These tests verify that the converter:
1. Initializes correctly and derives default output paths
2. Parses format names from the command line
3. Writes each output format next to the input
4. Performs a dry-run without writing files
5. Leaves no output behind when reading or writing fails

"""

import argparse
import builtins
import errno
import os

import pytest

from dose2gmsh import DoseConverter, FormatError, IoError, OutputFormat, default_output_path, parse_format_arg
from dose2gmsh.converter import describe_block, write_output
from conftest import CUBE, TWO_VOXELS


# ──────────────────────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────────────────────

def test_converter_init():
    """Ensure converter keeps the input and derives the output path."""
    conv = DoseConverter(input_file="runs/phantom.3ddose", fmt=OutputFormat.VTK, dry_run=True)
    assert conv.input_file == "runs/phantom.3ddose"
    assert conv.output_file == os.path.join("runs", "phantom.vtk")
    assert conv.dry_run


def test_converter_explicit_output():
    conv = DoseConverter(input_file="phantom.3ddose", output_file="out/dose.msh")
    assert conv.output_file == "out/dose.msh"
    assert conv.fmt is OutputFormat.MSH2


@pytest.mark.parametrize(
    "fmt, expected",
    [
        (OutputFormat.MSH2, "water_block.msh"),
        (OutputFormat.VTK, "water_block.vtk"),
        (OutputFormat.CSV, "water_block.csv"),
        (OutputFormat.VTKHDF, "water_block.vtkhdf"),
    ],
)
def test_default_output_path(fmt, expected):
    assert default_output_path("water_block.3ddose", fmt) == expected


def test_parse_format_arg():
    assert parse_format_arg("msh2") is OutputFormat.MSH2
    assert parse_format_arg("VTK") is OutputFormat.VTK
    assert parse_format_arg(" csv ") is OutputFormat.CSV


def test_parse_format_arg_invalid():
    with pytest.raises(argparse.ArgumentTypeError):
        parse_format_arg("stl")


# ──────────────────────────────────────────────────────────────
# Conversion
# ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("fmt", list(OutputFormat))
def test_process_writes_output(write_3ddose, fmt):
    path = write_3ddose(CUBE)
    written = DoseConverter(input_file=path, fmt=fmt).process()
    assert written == os.path.splitext(path)[0] + fmt.extension
    assert os.path.getsize(written) > 0


def test_process_csv_contents(write_3ddose, tmp_path):
    path = write_3ddose(TWO_VOXELS)
    out = str(tmp_path / "table.csv")
    DoseConverter(input_file=path, output_file=out, fmt=OutputFormat.CSV).process()
    with open(out) as fh:
        assert fh.read().splitlines()[1:] == ["0.5,2.5,5.0,1.0", "1.5,2.5,5.0,2.0"]


def test_dry_run_writes_nothing(write_3ddose):
    path = write_3ddose(CUBE)
    conv = DoseConverter(input_file=path, dry_run=True)
    assert conv.process() is None
    assert not os.path.exists(conv.output_file)


def test_invalid_input_leaves_no_output(write_3ddose):
    path = write_3ddose("3 1 1\n0 1 2\n0 5\n0 10\n1 2 3\n")
    conv = DoseConverter(input_file=path)
    with pytest.raises(FormatError):
        conv.process()
    assert not os.path.exists(conv.output_file)


def test_missing_input(tmp_path):
    conv = DoseConverter(input_file=str(tmp_path / "nope.3ddose"))
    with pytest.raises(IoError):
        conv.process()


def test_refuses_to_overwrite_input(write_3ddose):
    path = write_3ddose(CUBE, name="phantom.msh")
    with pytest.raises(IoError, match="overwrite"):
        DoseConverter(input_file=path, fmt=OutputFormat.MSH2).process()
    with open(path) as fh:
        assert fh.read() == CUBE


def test_write_output_unwritable(tmp_path):
    target = str(tmp_path / "missing_dir" / "out.msh")
    with pytest.raises(IoError):
        write_output(target, b"data")
    assert not os.path.exists(target)


class _DiskFullHandle:
    """File handle that writes a few bytes and then fails like a full disk."""

    def __init__(self, fh):
        self._fh = fh

    def write(self, data):
        self._fh.write(data[:4])
        self._fh.flush()
        raise OSError(errno.ENOSPC, "No space left on device")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self._fh.close()


def test_write_output_removes_partial_file(tmp_path, monkeypatch):
    """A write that fails after the file was opened leaves nothing behind."""
    target = str(tmp_path / "out.msh")
    monkeypatch.setattr(
        "dose2gmsh.converter.open",
        lambda path, mode: _DiskFullHandle(builtins.open(path, mode)),
        raising=False,
    )

    with pytest.raises(IoError, match="No space left"):
        write_output(target, b"$MeshFormat\n")
    assert not os.path.exists(target)


def test_describe_block(cube):
    text = describe_block(cube)
    assert "2x2x2 (8 total)" in text
    assert "Nodes:        27" in text
    assert "Max uncertainty: 0.08" in text
