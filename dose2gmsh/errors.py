# -*- coding: utf-8 -*-

"""

Exception types raised while converting 3ddose files.

Every failure is terminal for a conversion: the parser and the encoders raise,
and the CLI reports the message and exits non-zero.

"""

from __future__ import annotations

from typing import Optional


class Dose2GmshError(Exception):
    """Base class for all conversion errors."""


class IoError(Dose2GmshError):
    """
    Reading the input or writing the output failed.

    The underlying OSError is kept as ``__cause__``.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class FormatError(Dose2GmshError, ValueError):
    """The input does not follow the 3ddose layout (counts, boundaries, payload lengths)."""


class NumericParseError(FormatError):
    """
    A token that should be a number is not.

    Attributes:
        line: 1-based line number of the token in the input.
        token: the offending text.
        section: which part of the file was being read (e.g. "dose value").
    """

    def __init__(self, line: int, token: str, section: str):
        super().__init__(f"line {line}: expected {section}, got {token!r}")
        self.line = line
        self.token = token
        self.section = section


class EncodingError(Dose2GmshError):
    """A dose block is structurally inconsistent at the point of encoding."""
