#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
CLI QUICK START (copy–paste, then tweak)
──────────────────────────────────────────────────────────────────────────────
Example run (writes phantom.msh next to the input):

    dose2gmsh phantom.3ddose

Other formats and an explicit output path:

    dose2gmsh phantom.3ddose --format vtk -o results/phantom_dose.vtk
    dose2gmsh phantom.3ddose -f csv --verbose

Exploration mode :

    # Prints grid size, extents and dose range (no conversion happens)
    dose2gmsh phantom.3ddose --info

    # Dry-run: parse and encode, but don't write the output file
    dose2gmsh phantom.3ddose -f vtkhdf --dry-run --verbose

Required args:

    input_file         Path to the 3ddose file.

Optional args:

    --format / -f        msh2 (default), vtk, csv or vtkhdf
    --output-file / -o   Output path (default: input stem + format extension)
    --info               Only describe the dose grid and exit
    --dry-run            Run everything except the actual write step
    --verbose            step-by-step narration
    --version            Print the version and exit

Exit status is 0 on success and 1 when the input cannot be read or parsed or
the output cannot be written.

"""


import argparse
import logging
import sys
from typing import List, Optional

from .converter import DoseConverter, __version__, describe_block, parse_format_arg, setup_logging
from .encoders import OutputFormat
from .errors import Dose2GmshError

logger = logging.getLogger("dose2gmsh")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dose2gmsh",
        description="Convert DOSXYZnrc 3ddose files to Gmsh, VTK, CSV or VTKHDF files",
    )

    # Required inputs
    parser.add_argument("input_file", help="The input 3ddose file (REQUIRED)")

    # Output selection
    parser.add_argument(
        "-f", "--format", dest="fmt", type=parse_format_arg, default=OutputFormat.MSH2,
        help="Output format: msh2, vtk, csv or vtkhdf (default: msh2)",
    )
    parser.add_argument(
        "-o", "--output-file", dest="output_file", default=None,
        help="Output file name (default: <input_file> with the format's extension)",
    )

    parser.add_argument("--info", action="store_true", help="Print a summary of the dose grid and exit.")

    # Utility flags
    parser.add_argument("--dry-run", action="store_true", help="Parse and encode without writing files.")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:

    """
    Parse CLI args and run the conversion. Returns the process exit code.
    """

    args = build_parser().parse_args(argv)

    # Configure logging early
    setup_logging(args.verbose)

    conv = DoseConverter(
        input_file=args.input_file,
        output_file=args.output_file,
        fmt=args.fmt,
        dry_run=args.dry_run,
    )

    try:
        if args.info:
            block = conv.read_data()
            print(describe_block(block))
            return 0

        conv.process()
    except Dose2GmshError as e:
        logger.error("%s", e)
        logger.debug("Exception details:", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
