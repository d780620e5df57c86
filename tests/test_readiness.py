"""Tests for the readiness poller state machine."""
import time
from datetime import datetime, timedelta, timezone

import pytest

from podlab.errors import StatusQueryError, MalformedStatus, NodeCrashed, DeadlineExceeded
from podlab.readiness import ReadinessPoller, PollState, PollPhase, FATAL_STATUSES

INTERVAL = 0.005


def _deadline(seconds):
    return datetime.now() + timedelta(seconds=seconds)


@pytest.fixture
def poller(backend):
    return ReadinessPoller(backend, interval=INTERVAL, stability_threshold=10)


class TestPollState:
    def test_running_counts_up_to_threshold(self):
        state = PollState()
        for _ in range(2):
            assert state.observe("Running", 3, FATAL_STATUSES) is PollPhase.TRANSITIONAL
        assert state.observe("Running", 3, FATAL_STATUSES) is PollPhase.STABLE_RUNNING
        assert state.running_count == 3

    def test_other_status_resets_counter(self):
        state = PollState(running_count=7)
        assert state.observe("ContainerCreating", 10, FATAL_STATUSES) is PollPhase.TRANSITIONAL
        assert state.running_count == 0
        assert state.status == "ContainerCreating"

    def test_fatal_status(self):
        state = PollState()
        assert state.observe("ImagePullBackOff", 10, FATAL_STATUSES) is PollPhase.FATAL


class TestWaitUntilReady:
    def test_ready_after_tenth_consecutive_running(self, backend, poller):
        backend.script("n1", ["Pending"] * 3 + ["Running"] * 10)

        poller.wait_until_ready("n1", _deadline(5))

        assert backend.calls("n1") == 13

    def test_nine_running_is_not_enough(self, backend, poller):
        backend.script("n1", ["Pending"] * 3 + ["Running"] * 9 + ["Pending"])

        with pytest.raises(DeadlineExceeded):
            poller.wait_until_ready("n1", _deadline(0.3))

    def test_interrupted_run_needs_fresh_ten(self, backend, poller):
        backend.script("n1", ["Running"] * 5 + ["Pending"] + ["Running"] * 10)

        poller.wait_until_ready("n1", _deadline(5))

        assert backend.calls("n1") == 16

    def test_interrupted_run_of_fifteen_is_insufficient(self, backend, poller):
        backend.script("n1", ["Running"] * 5 + ["Pending"] + ["Running"] * 9 + ["Pending"])

        with pytest.raises(DeadlineExceeded):
            poller.wait_until_ready("n1", _deadline(0.3))

    def test_crash_loop_fails_immediately(self, backend, poller):
        backend.script("n1", ["CrashLoopBackOff", "Running"])

        with pytest.raises(NodeCrashed) as exc_info:
            poller.wait_until_ready("n1", _deadline(5))

        assert exc_info.value.node == "n1"
        assert exc_info.value.status == "CrashLoopBackOff"
        assert backend.calls("n1") == 1

    def test_custom_fatal_statuses(self, backend):
        backend.script("n1", ["Evicted"])
        poller = ReadinessPoller(backend, interval=INTERVAL, fatal_statuses=["Evicted"])

        with pytest.raises(NodeCrashed):
            poller.wait_until_ready("n1", _deadline(5))

    def test_deadline_not_raised_early(self, backend, poller):
        backend.script("n1", ["Pending"])
        deadline = _deadline(0.2)

        with pytest.raises(DeadlineExceeded) as exc_info:
            poller.wait_until_ready("n1", deadline)

        assert datetime.now() >= deadline
        assert exc_info.value.deadline == deadline
        assert "n1" in str(exc_info.value)

    def test_timezone_aware_deadline(self, backend, poller):
        backend.script("n1", ["Running"])
        poller.wait_until_ready("n1", datetime.now(timezone.utc) + timedelta(seconds=5))

    def test_polling_stops_after_deadline(self, backend, poller):
        backend.script("n1", ["Pending"])
        with pytest.raises(DeadlineExceeded):
            poller.wait_until_ready("n1", _deadline(0.05))

        after_deadline = backend.calls("n1")
        time.sleep(INTERVAL * 10)
        # at most one query can have been in flight when the deadline fired
        assert backend.calls("n1") <= after_deadline + 1

    def test_past_deadline_fails_without_querying(self, backend, poller):
        with pytest.raises(DeadlineExceeded):
            poller.wait_until_ready("n1", _deadline(-1))
        time.sleep(INTERVAL * 4)
        assert backend.calls("n1") == 0

    def test_query_failure_is_terminal(self, backend, poller, command_error):
        backend.status_error = command_error

        with pytest.raises(StatusQueryError) as exc_info:
            poller.wait_until_ready("n1", _deadline(5))

        assert exc_info.value.node == "n1"
        assert "connection refused" in str(exc_info.value)
        assert backend.calls("n1") == 1

    def test_malformed_status_is_terminal(self, backend, poller):
        backend.script("n1", [""])

        with pytest.raises(MalformedStatus):
            poller.wait_until_ready("n1", _deadline(5))

        assert backend.calls("n1") == 1


class TestPollerSettings:
    def test_rejects_zero_interval(self, backend):
        with pytest.raises(ValueError):
            ReadinessPoller(backend, interval=0)

    def test_rejects_zero_threshold(self, backend):
        with pytest.raises(ValueError):
            ReadinessPoller(backend, stability_threshold=0)
