# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
3ddose reader / writer
──────────────────────────────────────────────────────────────────────────────
A 3ddose file is whitespace-delimited ASCII, laid out header-then-payload:

    nx ny nz                  voxel counts
    x0 x1 ... x(nx)           x boundaries (nx + 1 values)
    y0 y1 ... y(ny)           y boundaries
    z0 z1 ... z(nz)           z boundaries
    d0 d1 ... d(N-1)          doses, N = nx*ny*nz, x fastest
    e0 e1 ... e(N-1)          fractional uncertainties (optional)

DOSXYZnrc writes one section per line. Other producers wrap long arrays over
several lines, which is accepted, but every section must end at the end of a
line.

"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple, Union

import numpy as np

from .dose import AXES, DoseBlock
from .errors import FormatError, IoError, NumericParseError

logger = logging.getLogger("dose2gmsh")

# plain decimal digits only; int() would also take "1_0"
_COUNT = re.compile(r"[+-]?[0-9]+")


class _SectionReader:
    """
    Reads whole lines until a section holds the expected number of values.
    """

    def __init__(self, text: str):
        self._lines = enumerate(text.splitlines(), start=1)
        self.line = 0

    def take(self, count: int, section: str) -> Tuple[List[int], List[str]]:
        """
        Take ``count`` tokens. Fewer are returned only at end of input.

        Raises:
            FormatError: the section ends in the middle of a line.
        """
        linenos: List[int] = []
        tokens: List[str] = []
        while len(tokens) < count:
            try:
                lineno, line = next(self._lines)
            except StopIteration:
                break
            self.line = lineno
            words = line.split()
            if len(tokens) + len(words) > count:
                raise FormatError(
                    f"line {lineno}: expected {count} {section} values but the section "
                    f"runs on to {len(tokens) + len(words)}"
                )
            tokens.extend(words)
            linenos.extend([lineno] * len(words))

        logger.debug("Read %d %s value(s) ending on line %d", len(tokens), section, self.line)
        return linenos, tokens

    def take_exact(self, count: int, section: str) -> Tuple[List[int], List[str]]:
        linenos, tokens = self.take(count, section)
        if len(tokens) < count:
            raise FormatError(
                f"expected {count} {section} values, found only {len(tokens)} "
                f"before end of input (line {self.line})"
            )
        return linenos, tokens

    def take_floats(self, count: int, section: str) -> np.ndarray:
        linenos, tokens = self.take_exact(count, section)
        return _to_floats(linenos, tokens, section)

    def remaining(self) -> Optional[int]:
        """Line number of the first non-blank line left, or None."""
        for lineno, line in self._lines:
            if line.strip():
                return lineno
        return None


def _to_floats(linenos: List[int], tokens: List[str], section: str) -> np.ndarray:
    try:
        return np.asarray(tokens, dtype=np.float64)
    except ValueError:
        pass

    # locate the first bad token for the error message
    for lineno, token in zip(linenos, tokens):
        try:
            float(token)
        except ValueError:
            raise NumericParseError(lineno, token, section) from None

    raise FormatError(f"could not read {section} values")


def _read_counts(reader: _SectionReader) -> Tuple[int, int, int]:
    try:
        linenos, tokens = reader.take(3, "voxel count")
    except FormatError:
        raise FormatError(f"line {reader.line}: header must give exactly 3 voxel counts (nx ny nz)") from None
    if len(tokens) < 3:
        raise FormatError(
            f"header must give 3 voxel counts (nx ny nz), found {len(tokens)}"
        )

    counts = []
    for lineno, token in zip(linenos, tokens):
        if not _COUNT.fullmatch(token):
            raise NumericParseError(lineno, token, "voxel count")
        value = int(token)
        if value <= 0:
            raise FormatError(f"line {lineno}: voxel counts must be positive, got {value}")
        counts.append(value)

    return counts[0], counts[1], counts[2]


def parse(raw: Union[bytes, str]) -> DoseBlock:
    """
    Parse the contents of a 3ddose file.

    Args:
        raw: file contents as bytes (or already-decoded text).

    Returns:
        The parsed DoseBlock. ``errors`` is None when the file has no
        uncertainty section.

    Raises:
        FormatError: counts, boundaries or payload lengths are inconsistent.
        NumericParseError: a token is not a number.
    """
    if isinstance(raw, bytes):
        # utf-8-sig also drops a leading byte-order mark
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FormatError(f"input is not a text file: {e}") from e
    else:
        text = raw

    reader = _SectionReader(text)

    counts = _read_counts(reader)
    logger.debug("Voxel counts: %s", counts)

    boundaries = []
    for axis, count in zip(AXES, counts):
        bounds = reader.take_floats(count + 1, f"{axis}-boundary")
        if not np.all(np.diff(bounds) > 0):
            raise FormatError(f"{axis}-boundaries are not strictly increasing (line {reader.line})")
        boundaries.append(bounds)

    num_voxels = counts[0] * counts[1] * counts[2]
    doses = reader.take_floats(num_voxels, "dose")

    errors: Optional[np.ndarray] = None
    linenos, tokens = reader.take(num_voxels, "uncertainty")
    if tokens:
        if len(tokens) < num_voxels:
            raise FormatError(
                f"expected {num_voxels} uncertainty values, found only {len(tokens)} "
                f"before end of input (line {reader.line})"
            )
        errors = _to_floats(linenos, tokens, "uncertainty")

    extra = reader.remaining()
    if extra is not None:
        raise FormatError(f"line {extra}: unexpected data after the last section")

    return DoseBlock(boundaries, doses, errors)


def read_3ddose(path) -> DoseBlock:
    """
    Read and parse a 3ddose file from disk.

    Raises:
        IoError: the file cannot be opened or read.
    """
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as e:
        raise IoError(f"cannot read '{path}': {e.strerror or e}", path=str(path)) from e

    logger.info("Read %d bytes from '%s'", len(raw), path)
    block = parse(raw)
    logger.info(
        "Parsed %s grid (%d voxels, uncertainties: %s)",
        "x".join(map(str, block.voxel_counts)),
        block.num_voxels,
        "yes" if block.has_errors else "no",
    )
    return block


def encode_3ddose(block: DoseBlock) -> bytes:
    """
    Write a DoseBlock back out in the 3ddose layout, one section per line.
    """
    sections = [" ".join(str(n) for n in block.voxel_counts)]
    sections.extend(_join(b) for b in block.boundaries)
    sections.append(_join(block.doses))
    if block.errors is not None:
        sections.append(_join(block.errors))
    return ("\n".join(sections) + "\n").encode("ascii")


def _join(values: np.ndarray) -> str:
    return " ".join(map(repr, values.tolist()))
