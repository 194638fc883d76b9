"""
Styled text: a character buffer with ranged style spans.

:class:`StyledTextBuilder` is the append-only buffer the decoder writes
into; :meth:`StyledTextBuilder.finish` hands back an immutable
:class:`StyledDocument`.  Spans are half-open ``[start, end)`` character
ranges, may overlap freely, and are never merged or edited once added.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

# Object replacement character; anchors separator-line spans.
SEPARATOR_GLYPH: str = "\ufffc"


class StyleKind(enum.Enum):
    BOLD = "bold"
    FOREGROUND_COLOR = "foreground_color"
    SEPARATOR_LINE = "separator_line"
    MONOSPACE = "monospace"
    RELATIVE_SIZE = "relative_size"


@dataclass(frozen=True)
class Span:
    """A style applied to the characters ``[start, end)``.

    Only the attributes relevant to ``kind`` are set: ``color`` for
    foreground color and separator lines, ``stroke`` for separator lines,
    ``factor`` for relative size.
    """

    kind: StyleKind
    start: int
    end: int
    color: str | None = None
    stroke: float | None = None
    factor: float | None = None

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Run:
    """A maximal stretch of text carrying the same set of spans."""

    text: str
    start: int
    spans: tuple[Span, ...]

    @property
    def kinds(self) -> frozenset[StyleKind]:
        return frozenset(span.kind for span in self.spans)


@dataclass(frozen=True)
class StyledDocument:
    """Finished output of a decode: text plus spans in insertion order."""

    text: str
    spans: tuple[Span, ...]

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def span_text(self, span: Span) -> str:
        return self.text[span.start:span.end]

    def spans_of(self, kind: StyleKind) -> list[Span]:
        return [span for span in self.spans if span.kind is kind]

    def runs(self) -> Iterator[Run]:
        """Split the text at every span boundary.

        Each yielded :class:`Run` lists the spans covering it, in
        insertion order.  Unstyled stretches are yielded with no spans.
        """
        boundaries = {0, len(self.text)}
        for span in self.spans:
            boundaries.add(span.start)
            boundaries.add(span.end)
        cuts = sorted(b for b in boundaries if 0 <= b <= len(self.text))
        for start, end in zip(cuts, cuts[1:]):
            if start == end:
                continue
            covering = tuple(s for s in self.spans if s.start <= start and end <= s.end)
            yield Run(self.text[start:end], start, covering)


class StyledTextBuilder:
    """Append-only styled text buffer."""

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._length = 0
        self._spans: list[Span] = []

    def __len__(self) -> int:
        return self._length

    def length(self) -> int:
        return self._length

    def append(self, text: str) -> StyledTextBuilder:
        self._chunks.append(text)
        self._length += len(text)
        return self

    def _mark(self, span: Span) -> None:
        if not 0 <= span.start <= span.end <= self._length:
            raise ValueError(
                f"span [{span.start}, {span.end}) outside buffer of length {self._length}"
            )
        self._spans.append(span)

    def mark_bold(self, start: int, end: int) -> None:
        self._mark(Span(StyleKind.BOLD, start, end))

    def mark_color_warning(self, start: int, end: int, color: str) -> None:
        self._mark(Span(StyleKind.FOREGROUND_COLOR, start, end, color=color))

    def mark_separator(self, start: int, end: int, color: str, stroke: float) -> None:
        self._mark(Span(StyleKind.SEPARATOR_LINE, start, end, color=color, stroke=stroke))

    def mark_monospace(self, start: int, end: int) -> None:
        self._mark(Span(StyleKind.MONOSPACE, start, end))

    def mark_relative_size(self, start: int, end: int, factor: float) -> None:
        self._mark(Span(StyleKind.RELATIVE_SIZE, start, end, factor=factor))

    def finish(self) -> StyledDocument:
        return StyledDocument("".join(self._chunks), tuple(self._spans))
