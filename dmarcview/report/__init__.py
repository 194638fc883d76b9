"""DMARC aggregate report decoding into styled text."""

from dmarcview.report.decoder import DecodeContext, ReportDecoder, decode_bytes, decode_report
from dmarcview.report.errors import DecodeError, InputUnreadable, MissingInput, XmlSyntax
from dmarcview.report.styled import SEPARATOR_GLYPH, Span, StyleKind, StyledDocument

__all__ = [
    "DecodeContext",
    "DecodeError",
    "InputUnreadable",
    "MissingInput",
    "ReportDecoder",
    "SEPARATOR_GLYPH",
    "Span",
    "StyleKind",
    "StyledDocument",
    "XmlSyntax",
    "decode_bytes",
    "decode_report",
]
