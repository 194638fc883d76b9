"""
Pull-style event source over a DMARC report document.

Wraps :class:`xml.etree.ElementTree.XMLPullParser` and flattens its
element events into the four event kinds the decoder walks over:
start-tag, end-tag, text and end-of-document.  Namespaces are dropped;
only local element names are reported.

The whole document is fed and closed before the first event is handed
out, so a syntax error anywhere in the input (including truncation) is
raised from the constructor and no event of a broken document is ever
observed.
"""

from __future__ import annotations

import enum
import logging
import xml.etree.ElementTree as ET
from collections import deque
from dataclasses import dataclass
from typing import Iterator

from dmarcview.report.errors import XmlSyntax

logger = logging.getLogger(__name__)


class EventKind(enum.Enum):
    START_TAG = "start"
    END_TAG = "end"
    TEXT = "text"
    END_DOCUMENT = "end_document"


@dataclass(frozen=True)
class XmlEvent:
    """One event of the pull stream.

    ``name`` is set for tag events, ``text`` for text events.
    """

    kind: EventKind
    name: str | None = None
    text: str | None = None


_END_DOCUMENT = XmlEvent(EventKind.END_DOCUMENT)


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an ElementTree tag."""
    return tag.rpartition("}")[2]


def _parse_events(data: bytes) -> list[tuple[str, ET.Element]]:
    """Feed *data* through a pull parser and return its element events."""
    parser = ET.XMLPullParser(events=("start", "end"))
    try:
        parser.feed(data)
        parser.close()
        return list(parser.read_events())
    except ET.ParseError as exc:
        line, column = getattr(exc, "position", (None, None))
        logger.warning("XML syntax error at line %s column %s: %s", line, column, exc)
        raise XmlSyntax(str(exc), line=line, column=column) from exc


def _flatten(events: list[tuple[str, ET.Element]]) -> Iterator[XmlEvent]:
    for event, elem in events:
        if not isinstance(elem.tag, str):
            continue
        name = local_name(elem.tag)
        if event == "start":
            yield XmlEvent(EventKind.START_TAG, name=name)
            if elem.text is not None:
                yield XmlEvent(EventKind.TEXT, text=elem.text)
        else:
            yield XmlEvent(EventKind.END_TAG, name=name)
            if elem.tail is not None:
                yield XmlEvent(EventKind.TEXT, text=elem.tail)


class XmlPullSource:
    """Cursor over the event stream of one XML document.

    Args:
        data: Raw XML bytes.  The encoding declaration, if any, is honoured.

    Raises:
        XmlSyntax: The document is malformed or truncated.
    """

    def __init__(self, data: bytes) -> None:
        self._events = _flatten(_parse_events(data))
        self._pushed_back: deque[XmlEvent] = deque()
        self.event: XmlEvent | None = None

    def next(self) -> XmlEvent:
        """Advance the cursor and return the new current event.

        Once the end of the document has been reached every further call
        returns the end-of-document event again.
        """
        if self._pushed_back:
            self.event = self._pushed_back.popleft()
        else:
            self.event = next(self._events, _END_DOCUMENT)
        return self.event

    def read_text_child(self) -> XmlEvent | None:
        """Consume the text event directly following the current start-tag.

        Returns that text event, or None when the next event is not text
        (an empty element or a nested element).  In that case the event is
        left in place so the next :meth:`next` call returns it.
        """
        current = self.event
        event = self.next()
        if event.kind is EventKind.TEXT:
            return event
        self._pushed_back.appendleft(event)
        self.event = current
        return None

    def __iter__(self) -> Iterator[XmlEvent]:
        while True:
            event = self.next()
            yield event
            if event.kind is EventKind.END_DOCUMENT:
                return
