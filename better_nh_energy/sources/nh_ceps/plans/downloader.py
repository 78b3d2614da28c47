"""
Downloader for the NH residential supplier comparison page.

Public API
----------
- download_compare_html(adapter, provider, url=..., timeout=None, retry=...) -> str
    Issues ``GET <url>?choice=<provider>`` and returns the decoded HTML.
- classify_fetch_error(exc) -> (kind, status)
    Maps a fetch exception to "timeout" | "http_status" | "network" | "unknown".

Notes
-----
Timeouts, connection errors and HTTP 5xx responses are retried according to
the `RetryPolicy`; everything else fails on the first attempt. The final
exception propagates to the caller, which owns logging and the "no data"
outcome.
"""

from __future__ import annotations

from typing import Literal, Optional

import structlog
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import HTTPError, RequestException, Timeout
from tenacity import RetryCallState

from better_nh_energy.common.http_adapter import HttpRequestsAdapter
from better_nh_energy.common.retry import RetryPolicy, build_retrying

logger = structlog.get_logger()

COMPARE_URL = "https://www.energy.nh.gov/engyapps/ceps/ResidentialCompare.aspx"

FetchErrorKind = Literal["timeout", "http_status", "network", "unknown"]


def _status_of(exc: BaseException) -> Optional[int]:
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def is_transient(exc: BaseException) -> bool:
    """True for failures worth another attempt (timeouts, connection errors, 5xx)."""
    if isinstance(exc, (Timeout, RequestsConnectionError)):
        return True
    if isinstance(exc, HTTPError):
        status = _status_of(exc)
        return status is not None and status >= 500
    return False


def classify_fetch_error(exc: BaseException) -> tuple[FetchErrorKind, Optional[int]]:
    """
    Classify a fetch failure for diagnostics.

    Returns:
        ``(kind, status)`` where ``status`` is the HTTP status code when a
        response was received, else None.
    """
    status = _status_of(exc)
    if isinstance(exc, Timeout):
        return "timeout", status
    if isinstance(exc, HTTPError) or status is not None:
        return "http_status", status
    if isinstance(exc, RequestException):
        return "network", None
    return "unknown", None


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "supplier_fetch_retry",
        attempt=state.attempt_number,
        error=str(exc) if exc else None,
    )


def download_compare_html(
    adapter: HttpRequestsAdapter,
    provider: str,
    *,
    url: str = COMPARE_URL,
    timeout: Optional[float] = None,
    retry: RetryPolicy = RetryPolicy(),
) -> str:
    """
    Fetch the comparison page for one utility provider.

    Parameters
    ----------
    adapter
        HTTP adapter carrying default headers and timeout.
    provider
        Value of the ``choice`` query parameter (e.g. "Eversource").
    url
        Comparison page URL.
    timeout
        Per-request timeout override in seconds.
    retry
        Bounded retry policy for transient failures.

    Returns
    -------
    str
        Page HTML decoded with the response encoding (UTF-8 fallback).

    Raises
    ------
    ValueError
        If ``provider`` is empty.
    requests.RequestException
        The last transport error once retries are exhausted.
    """
    if not provider:
        raise ValueError("provider must be a non-empty string")

    retrying = build_retrying(retry, is_transient, before_sleep=_log_retry)
    result = retrying(
        adapter.fetch,
        url,
        params={"choice": provider},
        timeout=timeout,
    )
    logger.debug(
        "supplier_page_fetched",
        provider=provider,
        status=result.status,
        size_bytes=len(result.data),
        elapsed_ms=result.elapsed_ms,
    )
    return result.text()


__all__ = [
    "COMPARE_URL",
    "FetchErrorKind",
    "is_transient",
    "classify_fetch_error",
    "download_compare_html",
]
