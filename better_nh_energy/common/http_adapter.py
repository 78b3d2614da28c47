"""
HTTP adapter for better-nh-energy (requests-based).

This module provides a thin adapter for issuing HTTP requests and returning a
transport-level result. The adapter focuses on performing a single request
with sensible defaults (e.g., User-Agent, Accept headers). Higher-level
behaviors (retry, backoff, failure classification) are handled by the
downloader and/or the calling code.

Design notes
------------
- Headers are stored and exposed as ``Mapping[str, str]`` (no ``bytes`` values).
- Default headers and timeout are injected at construction time.
- Network/client exceptions are propagated; the fetch orchestrator is
  responsible for classifying and recording failures at the pipeline boundary.

Thread-safety
-------------
This adapter does not guarantee thread safety. Use one instance per worker or
provide synchronization if you share an underlying ``requests.Session``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType, TracebackType
from typing import Any, Mapping, Optional, Type

import requests
from requests import Response, Session

DEFAULT_USER_AGENT = "Better NH Energy frontend"

_CHARSET_RE = re.compile(r"charset\s*=\s*([^;\s]+)", re.IGNORECASE)


def _elapsed_ms(resp: Response) -> Optional[int]:
    """Return the elapsed time in milliseconds for a ``requests.Response``.

    If the response has no timing information, returns ``None``.
    """
    elapsed: Optional[timedelta] = getattr(resp, "elapsed", None)
    if elapsed is None:
        return None
    return int(round(elapsed.total_seconds() * 1000.0))


def _headers_dict(headers: Mapping[str, Any]) -> dict[str, str]:
    """Convert a headers mapping to ``dict[str, str]`` with string values only.

    Any non-string values are coerced to ``str`` to satisfy type expectations
    in downstream consumers and to keep persistence JSON-friendly.
    """
    return {str(k): str(v) for k, v in headers.items()}


def _declared_charset(content_type: Optional[str]) -> Optional[str]:
    """Charset named in a ``Content-Type`` header, or ``None`` when absent.

    ``requests`` reports ISO-8859-1 for any ``text/*`` response without a
    charset; that guess is ignored here so the body decodes as UTF-8.
    """
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    return match.group(1).strip("\"'") if match else None


@dataclass(frozen=True)
class HttpResult:
    """Raw body plus transport metadata for one completed HTTP request."""

    data: bytes
    status: int
    url: str
    content_type: Optional[str] = None
    encoding: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    elapsed_ms: Optional[int] = None

    def text(self) -> str:
        """Decode the body with the declared charset (UTF-8 fallback, with replacement)."""
        return self.data.decode(self.encoding or "utf-8", errors="replace")


class HttpRequestsAdapter:
    """Requests-based HTTP adapter.

    The adapter issues a single HTTP request using an internal
    ``requests.Session`` and returns the raw body and transport metadata.
    Default headers and timeout are configured at construction; per-request
    overrides are passed to ``fetch``.

    Parameters
    ----------
    user_agent:
        String for the ``User-Agent`` header. Will be inserted into default
        headers if not already present.
    default_timeout:
        Timeout in seconds applied when a per-request timeout is not supplied.
    default_headers:
        Mapping of default headers applied to all requests. All values must be
        ``str``; header names are handled case-insensitively by the HTTP stack.

    Notes
    -----
    - ``fetch`` returns an ``HttpResult`` containing bytes and transport
      metadata (content type, status, headers, URL, elapsed).
    - Retries and failure logging are not the responsibility of this adapter;
      they belong in the downloader or orchestrators.
    - Usable as a context manager; the session is closed on exit.
    """

    # Clarify attribute type for Pyright
    default_headers: Mapping[str, str]

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        default_timeout: float = 30.0,
        default_headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize the adapter with default headers and timeout."""
        self._session: Session = requests.Session()

        # Set base defaults; allow caller overrides.
        base: dict[str, str] = {
            "User-Agent": user_agent,
            "Accept": "*/*",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
        }
        if default_headers:
            base.update(default_headers)

        self._session.headers.update(base)

        self._default_timeout = float(default_timeout)

        # Coerce to str-only values, then freeze for read-only exposure.
        coerced: dict[str, str] = _headers_dict(self._session.headers)
        self.default_headers = MappingProxyType(coerced)

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        allow_redirects: bool = True,
    ) -> HttpResult:
        """Perform an HTTP request and return the result.

        Parameters
        ----------
        url
            Absolute URL to request (required).
        method
            HTTP method to use.
        params
            Query-string parameters (e.g. ``{"choice": "Eversource"}``).
        headers
            Per-request headers merged over the adapter's default headers.
        timeout
            Per-request timeout in seconds; falls back to the adapter default.
        allow_redirects
            Whether to follow redirects.

        Returns
        -------
        HttpResult
            Metadata-rich result containing raw bytes and transport details.

        Raises
        ------
        ValueError
            If ``url`` is missing or empty.
        requests.HTTPError
            If the response status indicates an HTTP error (4xx/5xx).
        requests.RequestException
            Timeouts and connection errors from the underlying session.
        """
        if not isinstance(url, str) or not url:
            raise ValueError("HttpRequestsAdapter.fetch: url must be a non-empty string.")

        # Pass only per-request headers; requests merges them with session defaults.
        resp: Response = self._session.request(
            method=method.upper(),
            url=url,
            params=dict(params or {}),
            headers=dict(headers or {}),
            timeout=float(timeout if timeout is not None else self._default_timeout),
            allow_redirects=allow_redirects,
        )
        resp.raise_for_status()

        content_type = resp.headers.get("Content-Type")
        return HttpResult(
            data=resp.content,
            status=resp.status_code,
            url=resp.url,
            content_type=content_type,
            encoding=_declared_charset(content_type),
            headers=_headers_dict(resp.headers),
            elapsed_ms=_elapsed_ms(resp),
        )

    def describe(self) -> str:
        """Human-readable description of this adapter (for logs and diagnostics)."""
        return "Generic HTTP adapter via 'requests'"

    def close(self) -> None:
        """Close the underlying HTTP session and suppress any client shutdown errors."""
        try:
            self._session.close()
        except Exception:
            pass

    def __enter__(self) -> "HttpRequestsAdapter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        _ = (exc_type, exc_val, exc_tb)
        self.close()
