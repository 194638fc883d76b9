"""
Unit tests for dmarcview/report/styled.py
"""

from __future__ import annotations

import pytest

from dmarcview.report.styled import SEPARATOR_GLYPH, Span, StyleKind, StyledTextBuilder


def test_append_tracks_length():
    out = StyledTextBuilder()
    out.append("spf=").append("fail").append(" ")

    assert out.length() == 9
    assert len(out) == 9
    assert out.finish().text == "spf=fail "


def test_spans_keep_insertion_order_and_attributes():
    out = StyledTextBuilder()
    out.append(SEPARATOR_GLYPH + "\nfail")
    out.mark_separator(0, 1, "#ccc", 1.5)
    out.mark_color_warning(2, 6, "#f00")
    out.mark_bold(2, 6)
    out.mark_monospace(0, 6)
    out.mark_relative_size(0, 6, 0.8)

    spans = out.finish().spans

    assert [s.kind for s in spans] == [
        StyleKind.SEPARATOR_LINE,
        StyleKind.FOREGROUND_COLOR,
        StyleKind.BOLD,
        StyleKind.MONOSPACE,
        StyleKind.RELATIVE_SIZE,
    ]
    assert spans[0] == Span(StyleKind.SEPARATOR_LINE, 0, 1, color="#ccc", stroke=1.5)
    assert spans[1].color == "#f00"
    assert spans[4].factor == 0.8


def test_span_outside_buffer_is_rejected():
    out = StyledTextBuilder()
    out.append("abc")

    with pytest.raises(ValueError):
        out.mark_bold(1, 4)
    with pytest.raises(ValueError):
        out.mark_bold(2, 1)


def test_span_text_and_spans_of():
    out = StyledTextBuilder()
    out.append("row\nx")
    out.mark_bold(0, 3)
    document = out.finish()

    (bold,) = document.spans_of(StyleKind.BOLD)
    assert document.span_text(bold) == "row"
    assert document.spans_of(StyleKind.MONOSPACE) == []
    assert len(bold) == 3


def test_runs_split_at_overlapping_boundaries():
    out = StyledTextBuilder()
    out.append("abcdef")
    out.mark_bold(1, 4)
    out.mark_monospace(3, 6)

    runs = list(out.finish().runs())

    assert [r.text for r in runs] == ["a", "bc", "d", "ef"]
    assert runs[0].kinds == frozenset()
    assert runs[1].kinds == {StyleKind.BOLD}
    assert runs[2].kinds == {StyleKind.BOLD, StyleKind.MONOSPACE}
    assert runs[3].kinds == {StyleKind.MONOSPACE}
    assert runs[3].start == 4


def test_empty_document_has_no_runs():
    assert list(StyledTextBuilder().finish().runs()) == []
