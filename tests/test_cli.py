"""
Tests for the render_report.py command-line entry point.
"""

from __future__ import annotations

import gzip

import pytest

from dmarcview.report.styled import SEPARATOR_GLYPH
from render_report import main


@pytest.fixture
def report_file(tmp_path, sample_report):
    path = tmp_path / "report.xml"
    path.write_bytes(sample_report)
    return path


def test_plain_text_output(report_file, capsys):
    rc = main([str(report_file), "--timezone", "UTC", "--lookup", "none", "--width", "20"])

    out = capsys.readouterr().out
    assert rc == 0
    assert "google.com begin=" in out
    assert "begin=2023-11-14 22:13" in out
    assert "-" * 20 + "\n" in out
    assert SEPARATOR_GLYPH not in out
    assert "<feedback>" in out


def test_html_output(report_file, capsys):
    rc = main([str(report_file), "--html", "--timezone", "UTC", "--lookup", "none"])

    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith('<div class="dmarc-report"')


def test_gz_report(tmp_path, sample_report, capsys):
    path = tmp_path / "report.xml.gz"
    path.write_bytes(gzip.compress(sample_report))

    assert main([str(path), "--lookup", "none"]) == 0
    assert "google.com begin=" in capsys.readouterr().out


def test_missing_file_exits_with_error(tmp_path, capsys):
    path = tmp_path / "missing.xml"

    rc = main([str(path), "--lookup", "none"])

    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    assert f"error: {path}:" in captured.err


def test_malformed_report_exits_with_error(tmp_path, capsys):
    path = tmp_path / "broken.xml"
    path.write_bytes(b"<feedback><record>")

    assert main([str(path), "--lookup", "none"]) == 1
    assert "error:" in capsys.readouterr().err


def test_unknown_lookup_is_rejected(report_file):
    with pytest.raises(SystemExit):
        main([str(report_file), "--lookup", "whois"])
