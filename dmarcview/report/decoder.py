"""
DMARC aggregate report decoder (RFC 7489 appendix C schema).

Walks a report once with a pull parser and renders a human-oriented
summary into styled text: report metadata, the published policy, one
block per record row with its evaluated policy, identifiers and
authentication results, then a separator and a pretty-printed copy of
the raw XML in small monospace type.

Typical use::

    context = DecodeContext(timezone="Europe/Amsterdam")
    with open("report.xml", "rb") as fh:
        document = decode_report(fh, context)
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Mapping, Protocol

from dmarcview.report.fields import FieldExtractor
from dmarcview.report.pretty import format_xml
from dmarcview.report.pull import EventKind, XmlPullSource
from dmarcview.report.source import read_report
from dmarcview.report.styled import SEPARATOR_GLYPH, StyledDocument, StyledTextBuilder
from dmarcview.report.tracker import AUTH_METHODS, ContextTracker

logger = logging.getLogger(__name__)

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

# Regions that get a bold header line when they open.
_HEADED_REGIONS: frozenset[str] = frozenset({
    "report_metadata",
    "policy_published",
    "row",
    "identifiers",
    "auth_results",
})

# Trailing newlines written when a region closes inside <feedback>.
_CLOSING_NEWLINES: dict[str, str] = {
    "report_metadata": "\n\n",
    "policy_published": "\n\n",
    "row": "\n\n",
    "identifiers": "\n",
    "auth_results": "\n",
}

PRETTY_INDENT: int = 2


class NamedOrganization(Protocol):
    name: str


@dataclass
class DecodeContext:
    """Display options and collaborators for one decode.

    Attributes:
        timezone: IANA zone used to display ``begin``/``end`` timestamps.
        date_format: strftime format of the short date-time.
        warning_color: CSS color of highlighted non-pass results.
        separator_color: CSS color of the horizontal row separator.
        separator_stroke: Stroke width of the separator, in pixels.
        small_size: Relative size factor of the raw XML appendix.
        org_lookup: Maps a source IP to an object with a ``name``
            attribute or a mapping with a ``"name"`` key; may raise.
            None disables the annotation.
        pretty_print: ``(bytes, indent) -> str`` formatter of the raw
            XML; may raise.  None disables the appendix.
    """

    timezone: str = "UTC"
    date_format: str = "%Y-%m-%d %H:%M"
    warning_color: str = "#e65100"
    separator_color: str = "#9e9e9e"
    separator_stroke: float = 1.0
    small_size: float = 0.8
    org_lookup: Callable[[IpAddress], NamedOrganization | Mapping[str, str] | None] | None = None
    pretty_print: Callable[[bytes, int], str] | None = format_xml

    @classmethod
    def from_config(cls, config: Any, **overrides: Any) -> DecodeContext:
        """Build a context from a Flask-style config mapping."""
        values = {
            "timezone": config.get("DISPLAY_TIMEZONE", "UTC"),
            "date_format": config.get("DATE_FORMAT", "%Y-%m-%d %H:%M"),
            "warning_color": config.get("WARNING_COLOR", "#e65100"),
            "separator_color": config.get("SEPARATOR_COLOR", "#9e9e9e"),
            "separator_stroke": float(config.get("SEPARATOR_STROKE", 1.0)),
            "small_size": float(config.get("SMALL_TEXT_FACTOR", 0.8)),
        }
        values.update(overrides)
        return cls(**values)


class ReportDecoder:
    """Single-use decoder for one report document.

    Not thread-safe; create one per decode.
    """

    def __init__(self, data: bytes, context: DecodeContext) -> None:
        self.data = data
        self.context = context
        self.tracker = ContextTracker()
        self.out = StyledTextBuilder()
        self.source: XmlPullSource | None = None

    def decode(self) -> StyledDocument:
        """Render the report.

        Raises:
            XmlSyntax: The document is malformed.
        """
        self.source = XmlPullSource(self.data)
        fields = FieldExtractor(self.source, self.out, self.tracker, self.context)

        event = self.source.next()
        while event.kind is not EventKind.END_DOCUMENT:
            if event.kind is EventKind.START_TAG:
                self._start_tag(event.name, fields)
            elif event.kind is EventKind.END_TAG:
                self._end_tag(event.name)
            event = self.source.next()

        self._append_separator()
        self._append_pretty_xml()
        return self.out.finish()

    def _append_separator(self) -> None:
        start = self.out.length()
        self.out.append(SEPARATOR_GLYPH)
        self.out.mark_separator(
            start, self.out.length(), self.context.separator_color, self.context.separator_stroke
        )
        self.out.append("\n")

    def _start_tag(self, name: str, fields: FieldExtractor) -> None:
        self.tracker.open(name)
        if name == "row":
            self._append_separator()
        elif name == "auth_results":
            self.out.append("\n")

        fields.extract(name)

        if name in _HEADED_REGIONS:
            start = self.out.length()
            self.out.append(name)
            self.out.mark_bold(start, self.out.length())
            self.out.append("\n")

    def _end_tag(self, name: str) -> None:
        tracker = self.tracker
        if name in AUTH_METHODS:
            if tracker.feedback and tracker.auth_results:
                tracker.forget_auth_method()
                self.out.append("\n")
            return
        if not tracker.close(name):
            return
        if name in _CLOSING_NEWLINES and tracker.feedback:
            self.out.append(_CLOSING_NEWLINES[name])

    def _append_pretty_xml(self) -> None:
        pretty_print = self.context.pretty_print
        if pretty_print is None:
            return
        try:
            pretty = pretty_print(self.data, PRETTY_INDENT)
        except Exception as exc:
            logger.warning("Cannot pretty-print report XML: %s", exc)
            return
        start = self.out.length()
        self.out.append(pretty)
        end = self.out.length()
        self.out.mark_monospace(start, end)
        self.out.mark_relative_size(start, end, self.context.small_size)


def decode_bytes(data: bytes, context: DecodeContext | None = None) -> StyledDocument:
    """Decode an in-memory report.

    Raises:
        XmlSyntax: The document is malformed or truncated.
    """
    if context is None:
        context = DecodeContext()
    document = ReportDecoder(data, context).decode()
    logger.info(
        "Decoded DMARC report: %d bytes in, %d characters and %d spans out",
        len(data),
        len(document.text),
        len(document.spans),
    )
    return document


def decode_report(stream: BinaryIO | None, context: DecodeContext | None = None) -> StyledDocument:
    """Read a report from *stream* and decode it.

    Raises:
        MissingInput: *stream* is None.
        InputUnreadable: Reading the stream failed.
        XmlSyntax: The document is malformed or truncated.
    """
    return decode_bytes(read_report(stream), context)
