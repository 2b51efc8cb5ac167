#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

─────────────────────────────────────────────────────────────
Example Usage of dose2gmsh
─────────────────────────────────────────────────────────────

This script demonstrates how to use the `DoseConverter`
class and the encoders to inspect and convert a 3ddose file.

Features demonstrated:
1. Building a small synthetic dose block and saving it as 3ddose
2. Inspecting basic grid info
3. Performing a dry-run conversion (no files written)
4. Writing every supported output format

─────────────────────────────────────────────────────────────

"""

import os

import numpy as np

from dose2gmsh import DoseBlock, DoseConverter, OutputFormat, encode_3ddose
from dose2gmsh.converter import describe_block, setup_logging

# ──────────────────────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────────────────────

OUTPUT_DIR = "example_outputs"

INPUT_NAME = "water_block.3ddose"

VOXELS_PER_AXIS = 10


# ──────────────────────────────────────────────────────────────
# Helper Functions
# ──────────────────────────────────────────────────────────────


def make_water_block(n: int) -> DoseBlock:
    """
    A 20 cm cube with a dose falling off with depth along z and away from the
    central axis, roughly like a broad photon beam.
    """
    bounds = np.linspace(-10.0, 10.0, n + 1)
    centers = 0.5 * (bounds[:-1] + bounds[1:])
    z, y, x = np.meshgrid(centers + 10.0, centers, centers, indexing="ij")
    doses = np.exp(-0.05 * z) * np.exp(-(x ** 2 + y ** 2) / 50.0) * 1e-16
    errors = np.full(doses.size, 0.02)
    return DoseBlock([bounds, bounds, bounds], doses.ravel(), errors)


# ──────────────────────────────────────────────────────────────
# Main Example Workflow
# ──────────────────────────────────────────────────────────────

def main():

    setup_logging(verbose=False)

    print("=== dose2gmsh Example Usage ===")
    os.makedirs(OUTPUT_DIR, exist_ok=True)

    input_file = os.path.join(OUTPUT_DIR, INPUT_NAME)
    with open(input_file, "wb") as fh:
        fh.write(encode_3ddose(make_water_block(VOXELS_PER_AXIS)))
    print(f"Wrote synthetic input: {input_file}\n")

    converter = DoseConverter(input_file=input_file, dry_run=True)
    block = converter.read_data()
    print(describe_block(block))

    # dry-run: encodes the default msh2 output but writes nothing
    converter.convert_one(block)
    print()

    for fmt in OutputFormat:
        written = DoseConverter(input_file=input_file, fmt=fmt).convert_one(block)
        print(f"{fmt.value:>7}: {written}")

    print("\nOpen the .msh file in Gmsh or the .vtk/.vtkhdf files in ParaView.")


# ──────────────────────────────────────────────────────────────
# Entry Point
# ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
