"""
Tests for the timeout and bounded-retry wrapper.

Run with: pytest tests/test_resilience.py -v
"""

import asyncio
import time

import pytest

from jansahayak.errors import TransientDependencyError, ValidationError
from jansahayak.llm import RetryPolicy, call_with_resilience

FAST = RetryPolicy(max_attempts=3, backoff_base=0.01, backoff_max=0.02)


class Flaky:
    """Fails with the given errors, then returns 'ok'."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def run(fn, timeout=1.0, policy=FAST):
    return asyncio.run(call_with_resilience(fn, timeout=timeout, policy=policy, operation="test call"))


class TestCallWithResilience:
    """Only transient failures are retried, within the attempt budget."""

    def test_success_on_first_attempt(self):
        fn = Flaky()
        assert run(fn) == "ok"
        assert fn.calls == 1

    def test_arguments_are_passed_through(self):
        async def main():
            return await call_with_resilience(lambda a, b=0: a + b, 2, b=3, timeout=1.0, policy=FAST)

        assert asyncio.run(main()) == 5

    def test_transient_errors_are_retried(self):
        fn = Flaky(TransientDependencyError("blip"), TransientDependencyError("blip"))
        assert run(fn) == "ok"
        assert fn.calls == 3

    def test_budget_exhausted_raises_last_error(self):
        fn = Flaky(*[TransientDependencyError("down")] * 5)

        with pytest.raises(TransientDependencyError):
            run(fn)
        assert fn.calls == 3

    def test_validation_errors_are_not_retried(self):
        fn = Flaky(ValidationError("bad input"))

        with pytest.raises(ValidationError):
            run(fn)
        assert fn.calls == 1

    def test_timeout_becomes_transient_error(self):
        """A hung call is abandoned after the per-attempt timeout."""
        def slow():
            time.sleep(0.2)
            return "late"

        with pytest.raises(TransientDependencyError, match="timed out"):
            run(slow, timeout=0.05, policy=RetryPolicy(max_attempts=1))
