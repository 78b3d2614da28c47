from __future__ import annotations

import pytest

from better_nh_energy.common.retry import RetryPolicy, build_retrying


def _no_wait(attempts: int) -> RetryPolicy:
    return RetryPolicy(attempts=attempts, wait_seconds=0, max_wait_seconds=0)


def test_defaults() -> None:
    p = RetryPolicy()
    assert (p.attempts, p.wait_seconds, p.max_wait_seconds) == (3, 2.0, 10.0)


@pytest.mark.parametrize(
    "kwargs",
    [{"attempts": 0}, {"wait_seconds": -1.0}, {"max_wait_seconds": -0.5}],
)
def test_invalid_policy_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_retries_until_success() -> None:
    calls = {"n": 0}

    def flaky() -> str:
        calls["n"] += 1
        if calls["n"] < 3:
            raise ConnectionError("reset")
        return "done"

    retrying = build_retrying(_no_wait(3), lambda e: isinstance(e, ConnectionError))
    assert retrying(flaky) == "done"
    assert calls["n"] == 3


def test_reraises_original_after_last_attempt() -> None:
    calls = {"n": 0}

    def always() -> None:
        calls["n"] += 1
        raise ConnectionError(f"attempt {calls['n']}")

    retrying = build_retrying(_no_wait(2), lambda e: True)
    with pytest.raises(ConnectionError, match="attempt 2"):
        retrying(always)


def test_non_retryable_fails_immediately() -> None:
    calls = {"n": 0}
    slept: list[int] = []

    def bad() -> None:
        calls["n"] += 1
        raise KeyError("nope")

    retrying = build_retrying(
        _no_wait(5),
        lambda e: isinstance(e, ConnectionError),
        before_sleep=lambda state: slept.append(state.attempt_number),
    )
    with pytest.raises(KeyError):
        retrying(bad)
    assert calls["n"] == 1
    assert slept == []
