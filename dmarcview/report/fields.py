"""
Per-element rendering rules for the DMARC feedback schema.

Each recognised leaf element has a guard over the open regions and a
small rendering rule.  When the guard holds, the extractor consumes the
element's text child from the pull source and writes the rendered field
into the styled buffer.  Elements without a text child (``<sp/>``, or a
leaf that unexpectedly contains markup) produce no output.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dmarcview.report.pull import XmlPullSource
from dmarcview.report.styled import StyledTextBuilder
from dmarcview.report.tracker import AUTH_METHODS, ContextTracker

if TYPE_CHECKING:
    from dmarcview.report.decoder import DecodeContext

logger = logging.getLogger(__name__)

NULL_TEXT: str = "<null>"

_ALIGNMENT_MODES: dict[str, str] = {
    "r": "relaxed",
    "s": "strict",
}

# Signed decimal only; int() would also accept "1_000" and surrounding blanks.
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")

_INT32_MIN: int = -(2 ** 31)
_INT32_MAX: int = 2 ** 31 - 1


def parse_decimal(text: str) -> int | None:
    """Return *text* as an int if it is a plain signed decimal, else None."""
    if not _DECIMAL_RE.fullmatch(text):
        return None
    return int(text)


def parse_percentage(text: str) -> int | None:
    """Return *text* as a 32-bit int percentage, or None."""
    value = parse_decimal(text)
    if value is None or not _INT32_MIN <= value <= _INT32_MAX:
        return None
    return value


def format_timestamp(seconds: int, tz_name: str, fmt: str) -> str:
    """Render Unix *seconds* in the display zone *tz_name* using *fmt*."""
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name)).strftime(fmt)


def is_pass(value: str) -> bool:
    return value.lower() == "pass"


class FieldExtractor:
    """Render recognised leaf elements into a :class:`StyledTextBuilder`.

    Args:
        source: Pull source positioned on the element's start-tag.
        out: Buffer receiving the rendered fields.
        tracker: Region state of the current decode.
        context: Display options and collaborator callbacks.
    """

    def __init__(
        self,
        source: XmlPullSource,
        out: StyledTextBuilder,
        tracker: ContextTracker,
        context: DecodeContext,
    ) -> None:
        self.source = source
        self.out = out
        self.tracker = tracker
        self.context = context
        self._handlers: dict[str, Callable[[str], None]] = {
            "org_name": self._report_metadata,
            "begin": self._report_metadata,
            "end": self._report_metadata,
            "domain": self._domain,
            "adkim": self._policy,
            "aspf": self._policy,
            "p": self._policy,
            "sp": self._policy,
            "fo": self._policy,
            "pct": self._pct,
            "source_ip": self._row,
            "count": self._row,
            "disposition": self._evaluated,
            "dkim": self._evaluated,
            "spf": self._evaluated,
            "header_from": self._evaluated,
            "envelope_from": self._evaluated,
            "envelope_to": self._evaluated,
            "result": self._result,
            "selector": self._auth_detail,
            "scope": self._auth_detail,
        }

    def extract(self, name: str) -> None:
        """Apply the rule for element *name*, if it has one."""
        handler = self._handlers.get(name)
        if handler is not None:
            handler(name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_text(self) -> str | None:
        """Consume the element's text child.

        Returns None when there is no text event to consume.
        """
        event = self.source.read_text_child()
        if event is None:
            return None
        return event.text if event.text is not None else NULL_TEXT

    def _append_value(self, value: str, highlight: bool) -> None:
        start = self.out.length()
        self.out.append(value)
        if highlight:
            end = self.out.length()
            self.out.mark_color_warning(start, end, self.context.warning_color)
            self.out.mark_bold(start, end)
        self.out.append(" ")

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _report_metadata(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.report_metadata):
            return
        text = self._read_text()
        if text is None:
            return
        if name == "org_name":
            self.out.append(text).append(" ")
            return
        text = text.strip()
        try:
            seconds = parse_decimal(text)
            if seconds is None:
                raise ValueError(f"not a decimal timestamp: {text!r}")
            formatted = format_timestamp(seconds, self.context.timezone, self.context.date_format)
        except (ValueError, OverflowError, OSError, ZoneInfoNotFoundError) as exc:
            logger.warning("Cannot format %s=%r as a date: %s", name, text, exc)
            formatted = text
        self.out.append(f"{name}={formatted} ")

    def _domain(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and (t.policy_published or t.auth_results)):
            return
        text = self._read_text()
        if text is None:
            return
        self.out.append(f"{text} ")

    def _policy(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.policy_published):
            return
        text = self._read_text()
        if text is None:
            return
        if name in ("adkim", "aspf"):
            text = _ALIGNMENT_MODES.get(text, text)
        self.out.append(f"{name}={text} ")

    def _pct(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.policy_published):
            return
        text = self._read_text()
        if text is None:
            return
        if parse_percentage(text) is None:
            self.out.append(f"{name}={text} ")
        else:
            self.out.append(f"{text}% ")

    def _row(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.record and t.row):
            return
        text = self._read_text()
        if text is None:
            return
        self.out.append(f"{name}={text} ")
        if name == "source_ip":
            organization = self._lookup_organization(text)
            if organization:
                self.out.append(f"({organization}) ")

    def _lookup_organization(self, text: str) -> str | None:
        """Return the organization name owning *text*, or None."""
        lookup = self.context.org_lookup
        if lookup is None:
            return None
        try:
            address = ipaddress.ip_address(text.strip())
        except ValueError as exc:
            logger.warning("source_ip %r is not an IP address: %s", text, exc)
            return None
        try:
            organization = lookup(address)
        except Exception as exc:
            logger.warning("Organization lookup failed for %s: %s", address, exc)
            return None
        if organization is None:
            return None
        if isinstance(organization, Mapping):
            return organization.get("name")
        return getattr(organization, "name", None)

    def _evaluated(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.record):
            return
        if t.policy_evaluated or t.identifiers:
            text = self._read_text()
            if text is None:
                return
            self.out.append(f"{name}=")
            self._append_value(text, name in AUTH_METHODS and not is_pass(text))
        elif t.auth_results and name in AUTH_METHODS:
            t.remember_auth_method(name)

    def _result(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.auth_results):
            return
        text = self._read_text()
        if text is None:
            return
        self.out.append(f"{t.pending_auth_method or '?'}=")
        self._append_value(text, not is_pass(text))

    def _auth_detail(self, name: str) -> None:
        t = self.tracker
        if not (t.feedback and t.auth_results):
            return
        text = self._read_text()
        if text is None:
            return
        self.out.append(f"{name}={text} ")
