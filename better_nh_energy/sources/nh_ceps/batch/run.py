"""
Batch update of supplier plans for every configured provider.

Thin orchestrator:
  1) resolve providers, output dir and logs dir from config
  2) init run log
  3) loop providers: fetch + parse -> save -> log
  4) return per-provider results

A provider whose fetch or save fails is logged and skipped; its previously
written file is left untouched and the loop continues with the next provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal, Optional, Sequence

import structlog
from omegaconf import DictConfig

from better_nh_energy.bootstrap import http_adapter_from_config
from better_nh_energy.common.http_adapter import HttpRequestsAdapter
from better_nh_energy.config.config import nh_ceps_view
from better_nh_energy.sources.nh_ceps.batch.runlog import RunLog
from better_nh_energy.sources.nh_ceps.plans.api import get_supplier_plans
from better_nh_energy.sources.nh_ceps.plans.model import SupplierPlan
from better_nh_energy.sources.nh_ceps.plans.persistence import save_supplier_plans

logger = structlog.get_logger()

FetchPlans = Callable[..., Optional[list[SupplierPlan]]]


@dataclass(frozen=True)
class ProviderResult:
    provider: str
    status: Literal["ok", "err"]
    count: int = 0
    path: Optional[Path] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BatchStats:
    run_id: str
    results: list[ProviderResult] = field(default_factory=list)

    @property
    def ok(self) -> int:
        return sum(1 for r in self.results if r.status == "ok")

    @property
    def err(self) -> int:
        return sum(1 for r in self.results if r.status == "err")


def _failed(log: RunLog, provider: str, stage: str, error: str) -> ProviderResult:
    log.log(provider=provider, status="err", error=error, extra={"stage": stage})
    log.mark_err(provider, {"provider": provider, "stage": stage, "error": error})
    return ProviderResult(provider=provider, status="err", error=error)


def _process(
    provider: str,
    cfg: DictConfig,
    adapter: HttpRequestsAdapter,
    fetch: FetchPlans,
    log: RunLog,
    target_dir: Path,
    filename: str,
) -> ProviderResult:
    """Fetch and save one provider; failures are recorded, never raised."""
    plans = fetch(provider, cfg, adapter=adapter)
    if plans is None:
        return _failed(log, provider, "fetch", "failed to retrieve supplier information")

    try:
        path = save_supplier_plans(plans, target_dir, provider, filename=filename)
    except OSError as exc:
        logger.error("supplier_save_failed", provider=provider, error=str(exc))
        return _failed(log, provider, "save", str(exc))

    log.log(provider=provider, status="ok", count=len(plans), path=path)
    log.mark_ok(provider)
    return ProviderResult(provider=provider, status="ok", count=len(plans), path=path)


def run_batch(
    cfg: DictConfig,
    providers: Optional[Sequence[str]] = None,
    *,
    output_dir: Optional[Path] = None,
    run_id: Optional[str] = None,
    fetch: FetchPlans = get_supplier_plans,
    adapter: Optional[HttpRequestsAdapter] = None,
    on_result: Optional[Callable[[ProviderResult], None]] = None,
) -> BatchStats:
    """
    Scrape and persist plans for each provider.

    Args:
        cfg: Composed application config.
        providers: Provider choices; defaults to ``sources.nh_ceps.providers``.
        output_dir: Target directory; defaults to ``sources.nh_ceps.output_dir``.
        run_id: Run log identifier; defaults to a UTC timestamp.
        fetch: Plan source, ``fetch(provider, cfg, adapter=...)``.
        adapter: Shared HTTP adapter; built from config (and closed) if omitted.
        on_result: Called after each provider, e.g. to print a status line.

    Returns:
        BatchStats with one result per provider, in input order.
    """
    src = nh_ceps_view(cfg)
    chosen = list(providers) if providers is not None else [str(p) for p in src.providers]
    target_dir = output_dir if output_dir is not None else Path(str(src.output_dir))
    filename = str(src.output_filename)

    log = RunLog(Path(str(src.logs_dir)), run_id=run_id)
    logger.info("batch_started", run_id=log.run_id, providers=chosen)

    owned = adapter is None
    active = adapter if adapter is not None else http_adapter_from_config(cfg)
    results: list[ProviderResult] = []
    try:
        for provider in chosen:
            result = _process(provider, cfg, active, fetch, log, target_dir, filename)
            results.append(result)
            if on_result is not None:
                on_result(result)
    finally:
        if owned:
            active.close()

    stats = BatchStats(run_id=log.run_id, results=results)
    logger.info("batch_completed", run_id=stats.run_id, ok=stats.ok, err=stats.err)
    return stats


__all__ = ["ProviderResult", "BatchStats", "run_batch"]
