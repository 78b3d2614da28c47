"""
better_nh_energy.sources.nh_ceps.plans.api

Public entry point for scraping supplier plans of one utility provider.

Behavior:
- Fetches the comparison page for the provider and parses it.
- Any fetch or parse failure is classified, logged and reported as ``None``;
  nothing raises past this function, so batch callers can continue with the
  next provider.
- An empty list means the page was fetched but listed no plans.
"""

from __future__ import annotations

from typing import Optional

import structlog
from omegaconf import DictConfig

from better_nh_energy.bootstrap import http_adapter_from_config
from better_nh_energy.common.http_adapter import HttpRequestsAdapter
from better_nh_energy.config.config import load_nh_ceps_retry_policy, nh_ceps_view
from better_nh_energy.sources.nh_ceps.plans.downloader import (
    classify_fetch_error,
    download_compare_html,
)
from better_nh_energy.sources.nh_ceps.plans.model import SupplierPlan
from better_nh_energy.sources.nh_ceps.plans.parser import parse_supplier_plans

logger = structlog.get_logger()


def get_supplier_plans(
    provider: str,
    cfg: DictConfig,
    *,
    adapter: Optional[HttpRequestsAdapter] = None,
) -> Optional[list[SupplierPlan]]:
    """
    Scrape the plans offered to customers of `provider`.

    Args:
        provider: Utility choice, e.g. "Eversource".
        cfg: Composed application config.
        adapter: Optional shared HTTP adapter; when omitted one is built from
            config and closed before returning.

    Returns:
        Plans in page order, or None if the page could not be fetched or parsed.
    """
    src = nh_ceps_view(cfg)
    policy = load_nh_ceps_retry_policy(cfg)

    owned = adapter is None
    active = adapter if adapter is not None else http_adapter_from_config(cfg)
    try:
        logger.info("supplier_fetch_started", provider=provider)
        html = download_compare_html(active, provider, url=str(src.url), retry=policy)
        plans = parse_supplier_plans(html)
    except Exception as exc:
        kind, status = classify_fetch_error(exc)
        logger.error(
            "supplier_fetch_failed",
            provider=provider,
            kind=kind,
            status=status,
            error=str(exc),
        )
        return None
    finally:
        if owned:
            active.close()

    logger.info("supplier_plans_parsed", provider=provider, count=len(plans))
    return plans


__all__ = ["get_supplier_plans"]
