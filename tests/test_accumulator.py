"""Tests for folderwatch.core.accumulator."""

import logging

from folderwatch.core.accumulator import ChangeAccumulator
from folderwatch.core.differ import Changeset


def test_record_keeps_duplicates_across_calls(sink):
    acc = ChangeAccumulator(sink)

    acc.record(Changeset(created=["a.txt", "b.txt"]))
    acc.record(Changeset(created=["b.txt", "c.txt"], changed=["a.txt"]))

    assert acc.created == ["a.txt", "b.txt", "b.txt", "c.txt"]
    assert acc.changed == ["a.txt"]
    assert acc.pending == 5


def test_drain_reports_duplicates_then_empties(sink):
    acc = ChangeAccumulator(sink)
    acc.record(Changeset(created=["a.txt", "b.txt"]))
    acc.record(Changeset(created=["b.txt"]))

    drained = acc.drain_and_log()

    assert drained.created == ["a.txt", "b.txt", "b.txt"]
    assert sink.messages == ["Created files (3):\n - a.txt\n - b.txt\n - b.txt"]
    assert acc.is_empty()


def test_one_event_per_non_empty_category(sink):
    acc = ChangeAccumulator(sink)
    acc.record(Changeset(created=["new"], changed=["edited"], deleted=["gone"]))

    acc.drain_and_log()

    assert sink.messages == [
        "Created files (1):\n - new",
        "Updated files (1):\n - edited",
        "Deleted files (1):\n - gone",
    ]
    assert [extra["change_type"] for extra in sink.extras] == ["created", "updated", "deleted"]
    assert sink.extras[0]["paths"] == ["new"]


def test_empty_drain_logs_nothing(sink):
    acc = ChangeAccumulator(sink)

    drained = acc.drain_and_log()

    assert drained.is_empty()
    assert sink.messages == []


def test_failing_sink_still_clears_buffers(caplog):
    class BrokenSink:
        def info(self, *args, **kwargs):
            raise OSError("disk full")

    acc = ChangeAccumulator(BrokenSink())
    acc.record(Changeset(created=["a"], deleted=["b"]))

    with caplog.at_level(logging.ERROR, logger="folderwatch.core.accumulator"):
        acc.drain_and_log()

    assert acc.is_empty()
    assert "Failed to log created files: disk full" in caplog.text
    assert "Failed to log deleted files: disk full" in caplog.text


def test_snapshot_is_a_copy(sink):
    acc = ChangeAccumulator(sink)
    acc.record(Changeset(deleted=["x"]))

    copy = acc.snapshot()
    acc.drain_and_log()

    assert copy.deleted == ["x"]


def test_default_sink_is_module_logger(caplog):
    acc = ChangeAccumulator()
    acc.record(Changeset(changed=["a.txt"]))

    with caplog.at_level(logging.INFO, logger="folderwatch.core.accumulator"):
        acc.drain_and_log()

    assert "Updated files (1):" in caplog.text
    assert " - a.txt" in caplog.text
