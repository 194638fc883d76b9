"""
Decode failures for DMARC aggregate reports.

Every failure that aborts a decode is a subclass of :class:`DecodeError`,
so callers only need a single ``except`` clause.  Recoverable anomalies
inside an otherwise valid report are never raised; they are logged and
the render continues.
"""

from __future__ import annotations


class DecodeError(Exception):
    """Base class for all decode failures."""


class MissingInput(DecodeError):
    """The caller did not supply a report stream."""

    def __init__(self, message: str = "No report input supplied") -> None:
        super().__init__(message)


class InputUnreadable(DecodeError):
    """The report could not be opened, read or unpacked."""


class XmlSyntax(DecodeError):
    """The XML parser rejected the report document.

    Attributes:
        line: 1-based line of the error, when the parser reports one.
        column: 0-based column of the error, when the parser reports one.
    """

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
