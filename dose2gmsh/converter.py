#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
Converts DOSXYZnrc 3ddose files into formats that Gmsh, ParaView and other
visualization tools can read.

──────────────────────────────────────────────────────────────────────────────
WHY THIS EXISTS
──────────────────────────────────────────────────────────────────────────────
- EGSnrc writes dose grids as plain 3ddose text: voxel boundaries followed by
  flat dose and uncertainty arrays. Nothing opens it directly.
- Gmsh and ParaView want an explicit mesh with the dose attached to each cell.
  Converting once makes the dose browsable, sliceable and comparable.

──────────────────────────────────────────────────────────────────────────────
IT SUPPORTS:
──────────────────────────────────────────────────────────────────────────────
 - Gmsh 2.2 meshes (msh2), legacy VTK (vtk), CSV tables (csv) and VTKHDF
 - Grid inspection (--info) without writing anything
 - Dry-run mode (--dry-run) to parse and encode without writing files
 - Embedding run metadata (CLI command, timestamp, code version) in VTKHDF output

"""


from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys
import time
from typing import Dict, Optional

from .dose import DoseBlock
from .encoders import OutputFormat, encode
from .errors import IoError
from .parser import read_3ddose

__version__ = "1.0.0"


def setup_logging(verbose: bool) -> None:
    """
    Configure global logging.

    Args:
        verbose: If True, set DEBUG level, otherwise INFO.
    """

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )

    # Reduce noise from libraries (adjustable)
    logging.getLogger("h5py").setLevel(logging.WARNING)


logger = logging.getLogger("dose2gmsh")


def parse_format_arg(arg: str) -> OutputFormat:
    """
    Parse the --format argument ('msh2', 'vtk', 'csv' or 'vtkhdf', any case).

    Raises:
        argparse.ArgumentTypeError on unknown names.
    """

    try:
        return OutputFormat(arg.strip().lower())
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat)
        raise argparse.ArgumentTypeError(f"Unknown format '{arg}'; choose one of: {choices}.")


def default_output_path(input_file: str, fmt: OutputFormat) -> str:
    """
    Input path with its extension replaced by the format's, e.g. 'phantom.3ddose' -> 'phantom.msh'.
    """

    stem, _ = os.path.splitext(input_file)
    return stem + fmt.extension


def write_output(path: str, payload: bytes) -> None:
    """
    Write a fully encoded payload to ``path``.

    If writing fails after the file was opened, the partial file is removed.

    Raises:
        IoError: the file could not be opened or written.
    """

    fh = None
    try:
        fh = open(path, "wb")
        with fh:
            fh.write(payload)
    except OSError as e:
        if fh is not None:
            _discard(path)
        raise IoError(f"cannot write '{path}': {e.strerror or e}", path=path) from e


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.warning("Could not remove partial output '%s': %s", path, e)


class DoseConverter:
    """
    Convert one 3ddose file into one output file.

    Reading, encoding and writing are separate methods so each step can be
    exercised on its own.
    """

    def __init__(
        self,
        input_file: str,
        output_file: Optional[str] = None,
        fmt: OutputFormat = OutputFormat.MSH2,
        dry_run: bool = False,
    ):
        self.input_file = input_file
        self.fmt = fmt

        # None => next to the input, with the format's extension
        self.output_file = output_file if output_file else default_output_path(input_file, fmt)

        self.dry_run = dry_run

    def read_data(self) -> DoseBlock:
        """
        Load and parse the input file.
        """
        return read_3ddose(self.input_file)

    def _metadata(self) -> Dict[str, str]:
        return {
            "generator_command": shlex.join(sys.argv),
            "generator_timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "generator_version": __version__,
        }

    def convert_one(self, block: DoseBlock) -> Optional[str]:
        """
        Encode ``block`` and write it to the output file (unless dry-run).

        Returns:
            The written path, or None on a dry run.
        """
        if os.path.abspath(self.output_file) == os.path.abspath(self.input_file):
            raise IoError(f"refusing to overwrite the input file '{self.input_file}'", path=self.output_file)

        t0 = time.time()
        payload = encode(block, self.fmt, metadata=self._metadata())
        logger.debug("Encoded %d bytes of %s in %.2fs", len(payload), self.fmt.value, time.time() - t0)

        if self.dry_run:
            logger.info(
                "[dry-run] Would write '%s' (%s, %d bytes).",
                self.output_file,
                self.fmt.value,
                len(payload),
            )
            return None

        write_output(self.output_file, payload)
        logger.info("DONE: Saved '%s' in %.2fs", self.output_file, time.time() - t0)
        return self.output_file

    def process(self) -> Optional[str]:
        """
        Read and convert the input file (read_data + convert_one).
        """
        block = self.read_data()
        return self.convert_one(block)


def describe_block(block: DoseBlock) -> str:
    """
    Human-readable summary of a dose grid, one item per line.
    """
    info = block.summary()
    (x0, x1), (y0, y1), (z0, z1) = info["extent_cm"]
    lines = [
        f"Voxels:       {'x'.join(map(str, info['voxel_counts']))} ({info['num_voxels']} total)",
        f"Nodes:        {info['num_nodes']}",
        f"x extent:     [{x0:.6g}, {x1:.6g}] cm",
        f"y extent:     [{y0:.6g}, {y1:.6g}] cm",
        f"z extent:     [{z0:.6g}, {z1:.6g}] cm",
        f"Dose range:   [{info['dose_min']:.6g}, {info['dose_max']:.6g}] Gy cm2",
    ]
    if info["has_uncertainty"]:
        lines.append(f"Max uncertainty: {info['uncertainty_max']:.6g}")
    else:
        lines.append("Uncertainty:  none")
    return "\n".join(lines)
