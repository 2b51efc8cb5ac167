"""
Tests for examples/example_usage.py.

These tests verify that the example script:
1. Only logs the dry-run conversion, without writing it
2. Writes one file per output format next to the synthetic input

"""

import logging
import os
import runpy

from dose2gmsh import OutputFormat

EXAMPLE = os.path.join(os.path.dirname(__file__), os.pardir, "examples", "example_usage.py")


def test_example_usage(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    caplog.set_level(logging.INFO, logger="dose2gmsh")

    namespace = runpy.run_path(EXAMPLE)
    namespace["main"]()

    dry_runs = [r for r in caplog.records if r.getMessage().startswith("[dry-run]")]
    assert len(dry_runs) == 1
    saved = [r for r in caplog.records if r.getMessage().startswith("DONE: Saved")]
    assert len(saved) == len(OutputFormat)

    out_dir = tmp_path / "example_outputs"
    for fmt in OutputFormat:
        assert (out_dir / f"water_block{fmt.extension}").is_file()
