"""
Renderers for :class:`~dmarcview.report.styled.StyledDocument`.

``to_html`` produces an escaped HTML fragment for the web viewer,
``to_plain_text`` a terminal-friendly rendering for the command line.
"""

from __future__ import annotations

from markupsafe import Markup, escape

from dmarcview.report.styled import SEPARATOR_GLYPH, Span, StyleKind, StyledDocument


def _css(span: Span) -> str | None:
    if span.kind is StyleKind.BOLD:
        return "font-weight: bold"
    if span.kind is StyleKind.FOREGROUND_COLOR:
        return f"color: {span.color}"
    if span.kind is StyleKind.MONOSPACE:
        return "font-family: monospace"
    if span.kind is StyleKind.RELATIVE_SIZE:
        return f"font-size: {span.factor:g}em"
    return None


def _separator_html(span: Span) -> str:
    return (
        f'<hr class="dmarc-separator" style="border: 0; '
        f'border-top: {span.stroke:g}px solid {escape(span.color)}; margin: 0.25em 0">'
    )


def to_html(document: StyledDocument) -> Markup:
    """Render *document* as an HTML fragment.

    Text keeps its line breaks (``white-space: pre-wrap``); every style
    span becomes inline CSS and each separator glyph becomes an ``<hr>``.
    """
    parts: list[str] = ['<div class="dmarc-report" style="white-space: pre-wrap">']
    after_separator = False
    for run in document.runs():
        separators = [s for s in run.spans if s.kind is StyleKind.SEPARATOR_LINE]
        if separators and run.text == SEPARATOR_GLYPH * len(run.text):
            parts.append(_separator_html(separators[-1]) * len(run.text))
            after_separator = True
            continue
        text = run.text
        if after_separator and text.startswith("\n"):
            # The <hr> already ends the line.
            text = text[1:]
        after_separator = False
        if not text:
            continue
        styles = [css for css in (_css(span) for span in run.spans) if css]
        if styles:
            parts.append(f'<span style="{escape("; ".join(styles))}">{escape(text)}</span>')
        else:
            parts.append(str(escape(text)))
    parts.append("</div>")
    return Markup("".join(parts))


def to_plain_text(document: StyledDocument, width: int = 72) -> str:
    """Render *document* as plain text, drawing separators as dashes.

    Only glyphs under a separator-line span are drawn; any other U+FFFC
    in the text is kept as is.
    """
    chars = list(document.text)
    for span in document.spans_of(StyleKind.SEPARATOR_LINE):
        for index in range(span.start, span.end):
            if chars[index] == SEPARATOR_GLYPH:
                chars[index] = "-" * width
    return "".join(chars)
