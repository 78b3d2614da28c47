"""
Retry policy for outbound fetches.

`RetryPolicy` is the typed form of the `sources.nh_ceps.retry` config block.
`build_retrying` turns it into a tenacity `Retrying` controller with bounded
exponential backoff. Only exceptions accepted by the supplied predicate are
retried; after the last attempt the original exception is re-raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    wait_seconds: float = 2.0
    max_wait_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")
        if self.wait_seconds < 0 or self.max_wait_seconds < 0:
            raise ValueError("wait times must be non-negative")


def build_retrying(
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool],
    *,
    before_sleep: Optional[Callable[[RetryCallState], None]] = None,
) -> Retrying:
    """Return a tenacity controller for `policy`; `attempts=1` means a single try."""
    return Retrying(
        stop=stop_after_attempt(policy.attempts),
        wait=wait_exponential(
            multiplier=policy.wait_seconds,
            min=0,
            max=policy.max_wait_seconds,
        ),
        retry=retry_if_exception(should_retry),
        before_sleep=before_sleep,
        reraise=True,
    )


__all__ = ["RetryPolicy", "build_retrying"]
