"""
Unit tests for dmarcview/report/tracker.py
"""

from __future__ import annotations

from dmarcview.report.tracker import REGIONS, ContextTracker


def test_all_regions_start_closed():
    tracker = ContextTracker()

    assert tracker.open_regions() == []
    assert tracker.pending_auth_method is None


def test_open_and_close_region():
    tracker = ContextTracker()
    tracker.open("feedback")
    tracker.open("record")

    assert tracker.open_regions() == ["feedback", "record"]

    tracker.close("record")
    assert tracker.record is False
    assert tracker.feedback is True


def test_regions_only_open_inside_feedback():
    tracker = ContextTracker()

    assert tracker.open("report_metadata") is True
    assert tracker.report_metadata is False


def test_unknown_names_are_ignored():
    tracker = ContextTracker()

    assert tracker.open("date_range") is False
    assert tracker.close("date_range") is False
    assert tracker.is_open("date_range") is False


def test_missing_end_tag_leaves_flag_set():
    tracker = ContextTracker()
    for name in REGIONS:
        tracker.open(name)
    tracker.close("feedback")

    assert tracker.row is True
    assert "feedback" not in tracker.open_regions()


def test_auth_method_only_remembered_inside_auth_results():
    tracker = ContextTracker()
    tracker.open("feedback")
    tracker.remember_auth_method("dkim")
    assert tracker.pending_auth_method is None

    tracker.open("auth_results")
    tracker.remember_auth_method("spf")
    assert tracker.pending_auth_method == "spf"

    tracker.remember_auth_method("selector")
    assert tracker.pending_auth_method == "spf"


def test_closing_auth_results_forgets_method():
    tracker = ContextTracker()
    tracker.open("feedback")
    tracker.open("auth_results")
    tracker.remember_auth_method("dkim")

    tracker.close("auth_results")

    assert tracker.pending_auth_method is None
