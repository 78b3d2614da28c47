"""
Bootstrap wiring for better-nh-energy.

This module builds runtime collaborators from the composed config. It performs
**no implicit side effects on import**; callers (CLI, scripts, tests) invoke
these functions explicitly once the config is loaded.

Configuration
-------------
The HTTP adapter is configured under:

    sources.nh_ceps.http

Example (`default.yaml`):

    sources:
      nh_ceps:
        http:
          user_agent: "Better NH Energy frontend"
          default_timeout: 30.0
          default_headers:
            Accept: "text/html"

Logging is configured under the top-level ``logging`` block (``level``,
``json``).

Usage
-----
    from better_nh_energy.bootstrap import configure_logging, http_adapter_from_config
    from better_nh_energy.config.config import load_config

    cfg = load_config()
    configure_logging(cfg)
    with http_adapter_from_config(cfg) as adapter:
        ...
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Mapping, Optional, cast

import structlog
from omegaconf import DictConfig, OmegaConf

from better_nh_energy.common.http_adapter import (
    DEFAULT_USER_AGENT,
    HttpRequestsAdapter,
)
from better_nh_energy.config.config import logging_view, nh_ceps_http_view


def _coerce_headers(m: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, str]]:
    if m is None:
        return None
    return {str(k): str(v) for k, v in m.items()}


def http_adapter_from_config(cfg: DictConfig) -> HttpRequestsAdapter:
    """Build an `HttpRequestsAdapter` from `sources.nh_ceps.http`."""
    http = nh_ceps_http_view(cfg)

    user_agent = str(http.get("user_agent", DEFAULT_USER_AGENT))
    default_timeout = float(http.get("default_timeout", 30.0))

    raw_headers = http.get("default_headers")
    headers = (
        _coerce_headers(cast(Mapping[str, Any], OmegaConf.to_container(raw_headers)))
        if isinstance(raw_headers, DictConfig)
        else None
    )

    return HttpRequestsAdapter(
        user_agent=user_agent,
        default_timeout=default_timeout,
        default_headers=headers,
    )


def configure_logging(cfg: DictConfig) -> None:
    """Configure structlog from the `logging` block (level, json); logs go to stderr."""
    view = logging_view(cfg)
    level_name = str(view.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if bool(view.get("json", False))
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
