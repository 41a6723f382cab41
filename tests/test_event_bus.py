"""
Tests for sheetapp/services/event_bus.py -- EventBus singleton and signals.
"""

import threading
from unittest.mock import MagicMock

import pytest

from sheetapp.services.event_bus import EventBus


@pytest.fixture(autouse=True)
def _reset_event_bus():
    """Ensure each test starts with a fresh EventBus."""
    EventBus.reset()
    yield
    EventBus.reset()


# ------------------------------------------------------------------
# Singleton tests
# ------------------------------------------------------------------


class TestSingletonPattern:
    def test_instance_returns_same_object(self, qapp):
        assert EventBus.instance() is EventBus.instance()

    def test_reset_clears_instance(self, qapp):
        bus1 = EventBus.instance()
        EventBus.reset()
        assert EventBus.instance() is not bus1

    def test_thread_safe_creation(self, qapp):
        """Threads racing to create the instance all get the same object."""
        results = []
        barrier = threading.Barrier(4)

        def _grab():
            barrier.wait()
            results.append(id(EventBus.instance()))

        threads = [threading.Thread(target=_grab) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(results)) == 1


# ------------------------------------------------------------------
# Signal tests
# ------------------------------------------------------------------


class TestSignals:
    def test_row_created_signal(self, qapp):
        bus = EventBus.instance()
        receiver = MagicMock()
        bus.row_created.connect(receiver)
        bus.row_created.emit("skill")
        receiver.assert_called_once_with("skill")

    def test_row_deleted_signal(self, qapp):
        bus = EventBus.instance()
        receiver = MagicMock()
        bus.row_deleted.connect(receiver)
        bus.row_deleted.emit("weapon", "Dagger")
        receiver.assert_called_once_with("weapon", "Dagger")

    def test_submission_started_and_finished(self, qapp):
        bus = EventBus.instance()
        started = MagicMock()
        finished = MagicMock()
        bus.submission_started.connect(started)
        bus.submission_finished.connect(finished)

        bus.submission_started.emit("pc-001")
        bus.submission_finished.emit("pc-001", "1 saved, 0 removed")

        started.assert_called_once_with("pc-001")
        finished.assert_called_once_with("pc-001", "1 saved, 0 removed")

    def test_error_occurred_signal(self, qapp):
        bus = EventBus.instance()
        receiver = MagicMock()
        bus.error_occurred.connect(receiver)
        bus.error_occurred.emit("Something went wrong")
        receiver.assert_called_once_with("Something went wrong")

    def test_multiple_receivers(self, qapp):
        bus = EventBus.instance()
        r1 = MagicMock()
        r2 = MagicMock()
        bus.status_message.connect(r1)
        bus.status_message.connect(r2)
        bus.status_message.emit("Saved")
        r1.assert_called_once_with("Saved")
        r2.assert_called_once_with("Saved")
