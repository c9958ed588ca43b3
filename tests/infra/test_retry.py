"""
Tests for infra/retry.py

Sleeps are recorded, never performed.
"""

import pytest

from infra.errors import PermanentBackendError
from infra.retry import RetryPolicy
from tests.fakes import RecordingSleep, permanent, transient


def flaky(errors, result="ok"):
    """Callable raising each error in turn, then returning result."""
    pending = list(errors)
    calls = {"count": 0}

    def fn():
        calls["count"] += 1
        if pending:
            raise pending.pop(0)
        return result

    return fn, calls


class TestBackoff:
    def test_exponential_until_cap(self):
        policy = RetryPolicy(rand=lambda: 0.0)
        assert [policy.backoff(a) for a in range(8)] == [1, 2, 4, 8, 16, 32, 60, 60]

    def test_jitter_added(self):
        policy = RetryPolicy(rand=lambda: 0.5, jitter_seconds=1.0)
        assert policy.backoff(0) == pytest.approx(1.5)

    def test_huge_attempt_stays_capped(self):
        policy = RetryPolicy(rand=lambda: 0.0)
        assert policy.backoff(10_000) == 60

    def test_custom_cap(self):
        policy = RetryPolicy(rand=lambda: 0.0, backoff_cap_seconds=5)
        assert policy.backoff(6) == 5


class TestExecuteWithRetry:
    @pytest.mark.parametrize("k", [0, 1, 3, 7])
    def test_k_transient_errors_mean_k_plus_one_attempts(self, retry_policy, sleeps, k):
        fn, calls = flaky([transient() for _ in range(k)])

        assert retry_policy.execute_with_retry(fn, operation="upload") == "ok"
        assert calls["count"] == k + 1
        assert len(sleeps.delays) == k
        assert all(delay <= 61.0 for delay in sleeps.delays)

    def test_delays_grow(self, retry_policy, sleeps):
        fn, _ = flaky([transient(429) for _ in range(4)])
        retry_policy.execute_with_retry(fn)
        assert sleeps.delays == sorted(sleeps.delays)
        assert sleeps.delays[0] == pytest.approx(1.999)

    def test_permanent_error_is_not_retried(self, retry_policy, sleeps):
        error = permanent(404)
        fn, calls = flaky([error])

        with pytest.raises(PermanentBackendError) as exc_info:
            retry_policy.execute_with_retry(fn)

        assert exc_info.value is error
        assert calls["count"] == 1
        assert sleeps.delays == []

    def test_other_exceptions_propagate(self, retry_policy, sleeps):
        fn, calls = flaky([KeyError("x")])
        with pytest.raises(KeyError):
            retry_policy.execute_with_retry(fn)
        assert calls["count"] == 1
        assert sleeps.delays == []

    def test_permanent_after_transients(self, retry_policy, sleeps):
        fn, calls = flaky([transient(), transient(), permanent(400)])
        with pytest.raises(PermanentBackendError):
            retry_policy.execute_with_retry(fn)
        assert calls["count"] == 3
        assert len(sleeps.delays) == 2

    def test_retries_logged(self, tmp_path):
        from infra.logger import create_logger
        import json

        logger = create_logger("run", "retry", log_dir=tmp_path)
        policy = RetryPolicy(logger=logger, sleep=RecordingSleep(), rand=lambda: 0.0)
        fn, _ = flaky([transient(503)])
        policy.execute_with_retry(fn, operation="read_back")
        logger.close()

        lines = [json.loads(l) for l in (tmp_path / "retry.jsonl").read_text().splitlines()]
        assert lines[0]["level"] == "WARNING"
        assert lines[0]["operation"] == "read_back"
        assert lines[0]["attempt"] == 1
        assert lines[0]["delay_seconds"] == 1.0
