"""
Unit tests for bounded condition polling.
"""

import time

import pytest

from ftd_host.waiting import POLL_INTERVAL_S, WaitTimeoutError, wait_for


class TestWaitFor:
    """Test wait_for()."""

    def test_true_immediately(self):
        """No sleep when the condition already holds."""
        calls = []

        def condition():
            calls.append(1)
            return True

        start = time.monotonic()
        wait_for(condition, timeout_s=5.0)

        assert len(calls) == 1
        assert time.monotonic() - start < POLL_INTERVAL_S

    def test_true_after_some_checks(self):
        """Returns once the condition becomes true."""
        results = iter([False, False, False, True])

        wait_for(lambda: next(results), timeout_s=5.0, poll_interval_s=0.001)

        assert next(results, None) is None

    def test_timeout_raised(self):
        """A condition that never holds raises WaitTimeoutError."""
        start = time.monotonic()
        with pytest.raises(WaitTimeoutError) as exc_info:
            wait_for(lambda: False, timeout_s=0.2, poll_interval_s=0.02)
        elapsed = time.monotonic() - start

        assert exc_info.value.timeout_s == 0.2
        assert elapsed >= 0.2
        assert elapsed < 0.2 + 0.5  # one interval plus scheduling slack

    def test_timeout_is_builtin_timeout(self):
        """Callers can catch the builtin TimeoutError."""
        with pytest.raises(TimeoutError):
            wait_for(lambda: False, timeout_s=0.01, poll_interval_s=0.005)

    def test_zero_timeout_checks_once(self):
        """A zero budget still evaluates the condition once."""
        calls = []

        def condition():
            calls.append(1)
            return False

        with pytest.raises(WaitTimeoutError):
            wait_for(condition, timeout_s=0.0)

        assert len(calls) == 1

    def test_condition_exception_propagates(self):
        """Predicate failures are not turned into timeouts."""

        def condition():
            raise RuntimeError("query failed")

        with pytest.raises(RuntimeError, match="query failed"):
            wait_for(condition, timeout_s=5.0)

    def test_message_names_condition(self):
        """Timeout message carries the description."""
        with pytest.raises(WaitTimeoutError, match="state in"):
            wait_for(lambda: False, timeout_s=0.01, poll_interval_s=0.005, description="state in ['leader']")
