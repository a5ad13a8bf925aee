"""Tests for the bounded poll helper."""

from unittest.mock import Mock

import pytest

from jetson_passthrough.retry import poll


class TestPoll:
    def test_succeeds_on_first_attempt_without_sleeping(self):
        sleep = Mock()
        result = poll(lambda: True, attempts=30, delay=1.0, sleep=sleep)

        assert result.ok is True
        assert result.attempts == 1
        sleep.assert_not_called()

    def test_succeeds_once_check_turns_true(self):
        check = Mock(side_effect=[False, False, True])
        sleep = Mock()

        result = poll(check, attempts=30, delay=1.0, sleep=sleep)

        assert result.ok is True
        assert result.attempts == 3
        assert check.call_count == 3
        assert sleep.call_count == 2

    def test_exhausts_exactly_the_attempt_budget(self):
        check = Mock(return_value=False)
        sleep = Mock()

        result = poll(check, attempts=30, delay=1.0, sleep=sleep)

        assert result.ok is False
        assert result.attempts == 30
        assert check.call_count == 30
        # spacing between attempts only, none after the last one
        assert sleep.call_count == 29
        sleep.assert_called_with(1.0)

    def test_exception_counts_as_failed_attempt(self):
        check = Mock(side_effect=[RuntimeError("boom"), True])
        result = poll(check, attempts=3, delay=0.5, sleep=Mock())

        assert result.ok is True
        assert result.attempts == 2

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            poll(lambda: True, attempts=0, delay=1.0)
