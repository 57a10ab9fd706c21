# File: tests/test_progress.py
from app.config import DEFAULT_MILESTONES
from app.models.progress import ProgressTracker


def test_fractions_never_decrease(tracker, events):
    tracker.report(0.2, "a")
    tracker.report(0.1, "b")
    tracker.report(0.5, "c")

    assert [e["fraction"] for e in events] == [0.2, 0.2, 0.5]
    assert [e["message"] for e in events] == ["a", "b", "c"]
    assert events[-1]["progress"] == 50


def test_fraction_is_clamped(tracker, events):
    tracker.report(-1.0, "low")
    tracker.report(7.0, "high")

    assert events[0]["fraction"] == 0.0
    assert events[1]["fraction"] == 1.0


def test_nothing_after_completion_but_terminal_event(tracker, events):
    tracker.report(0.3, "working")
    tracker.complete()
    tracker.report(0.9, "late")
    tracker.send_result({"differences": {}})
    tracker.send_error("ignored")

    assert [e["type"] for e in events] == ["progress", "progress", "result"]
    assert events[1]["progress"] == 100
    assert tracker.terminated


def test_error_event_carries_context(tracker, events):
    tracker.report(0.4, "working")
    tracker.send_error("boom", context="site=new page='/a'")

    assert events[-1] == {"type": "error", "message": "boom", "context": "site=new page='/a'"}


def test_tracker_without_callback_keeps_history():
    tracker = ProgressTracker()
    tracker.report(0.5, "half")
    assert tracker.fraction == 0.5
    assert len(tracker.history) == 1


def test_verification_window():
    assert DEFAULT_MILESTONES.verification(0, 10) == DEFAULT_MILESTONES.verify_start
    assert DEFAULT_MILESTONES.verification(10, 10) == DEFAULT_MILESTONES.verify_end
    assert DEFAULT_MILESTONES.verification(0, 0) == DEFAULT_MILESTONES.verify_end


def test_terminal_event_closes_the_channel(tracker, events):
    tracker.report(0.5, "half")
    assert not tracker.terminated

    tracker.send_error("boom")

    assert tracker.history[-1].is_terminal
    assert tracker.terminated
    tracker.report(0.9, "late")
    assert [e["type"] for e in events] == ["progress", "error"]


def test_elapsed_seconds_grows():
    tracker = ProgressTracker()
    assert tracker.elapsed_seconds >= 0.0
