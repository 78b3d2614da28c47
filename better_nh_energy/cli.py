"""
Command-line entry point for better-nh-energy.

Commands:
    update   Scrape every configured provider and write one JSON file each.
    scrape   Scrape one provider and print its plans as JSON (no file written).
    status   Summarize the latest (or a given) batch run.

Usage:
    better-nh-energy update
    better-nh-energy update --provider Eversource --provider Unitil
    better-nh-energy scrape Liberty
    better-nh-energy status
    better-nh-energy --set sources.nh_ceps.retry.attempts=1 update
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from omegaconf import DictConfig
from rich.console import Console
from rich.table import Table

from better_nh_energy.bootstrap import configure_logging
from better_nh_energy.config.config import (
    ensure_nh_ceps_config,
    load_config,
    nh_ceps_view,
)
from better_nh_energy.sources.nh_ceps.batch.run import ProviderResult, run_batch
from better_nh_energy.sources.nh_ceps.batch.runlog import (
    get_latest_run_dir,
    load_progress,
)
from better_nh_energy.sources.nh_ceps.plans.api import get_supplier_plans
from better_nh_energy.sources.nh_ceps.plans.persistence import plans_to_json

console = Console()


def _print_result(result: ProviderResult) -> None:
    if result.status == "ok":
        console.print(
            f"[green]✔[/green] {result.provider}: {result.count} plans written to {result.path}"
        )
    else:
        console.print(
            f"[red]✘[/red] {result.provider}: failed to retrieve supplier information"
        )


def cmd_update(cfg: DictConfig, args: argparse.Namespace) -> int:
    output_dir = Path(args.output_dir) if args.output_dir else None
    stats = run_batch(
        cfg,
        providers=args.provider or None,
        output_dir=output_dir,
        on_result=_print_result,
    )
    console.print(
        f"Run {stats.run_id}: {stats.ok} succeeded, {stats.err} failed."
    )
    return 0 if stats.ok > 0 else 1


def cmd_scrape(cfg: DictConfig, args: argparse.Namespace) -> int:
    plans = get_supplier_plans(args.provider, cfg)
    if plans is None:
        console.print("Failed to retrieve supplier information.", style="red")
        return 1
    sys.stdout.write(json.dumps(plans_to_json(plans), ensure_ascii=False, indent=2) + "\n")
    return 0


def summarize_progress(progress: Sequence[Mapping[str, Any]]) -> dict[str, int]:
    """Count ok / err occurrences."""
    counts: dict[str, int] = {"ok": 0, "err": 0}
    for record in progress:
        status = record.get("status")
        if status in counts:
            counts[status] += 1
    counts["total"] = sum(counts.values())
    return counts


def cmd_status(cfg: DictConfig, args: argparse.Namespace) -> int:
    runs_root = Path(str(nh_ceps_view(cfg).logs_dir)) / "runs"
    try:
        run_dir = runs_root / args.run_id if args.run_id else get_latest_run_dir(runs_root)
        progress = load_progress(run_dir)
    except FileNotFoundError as exc:
        console.print(str(exc), style="red")
        return 1

    console.rule(f"[bold cyan]Supplier plan update ({run_dir.name})")

    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Plans", justify="right")
    table.add_column("Detail")
    for rec in progress:
        ok = rec.get("status") == "ok"
        table.add_row(
            str(rec.get("provider", "")),
            "[green]ok[/green]" if ok else "[red]err[/red]",
            str(rec.get("count", "")) if ok else "",
            str(rec.get("path", "")) if ok else str(rec.get("error", "")),
        )
    console.print(table)

    counts = summarize_progress(progress)
    console.print(
        f"{counts['ok']} ok, {counts['err']} err, {counts['total']} total"
    )
    console.rule()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="better-nh-energy",
        description="Scrape NH residential energy-supplier plans.",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML file merged over the defaults."
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Config override in dotlist form (repeatable).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    update = sub.add_parser("update", help="Scrape all providers and write JSON files.")
    update.add_argument(
        "--provider",
        action="append",
        default=[],
        help="Provider choice to update (repeatable; default: all configured).",
    )
    update.add_argument(
        "--output-dir", default=None, help="Directory for the JSON files."
    )
    update.set_defaults(func=cmd_update)

    scrape = sub.add_parser("scrape", help="Print one provider's plans as JSON.")
    scrape.add_argument("provider", help="Provider choice, e.g. Eversource.")
    scrape.set_defaults(func=cmd_scrape)

    status = sub.add_parser("status", help="Summarize a batch run.")
    status.add_argument("--run-id", default=None, help="Run id (default: latest).")
    status.set_defaults(func=cmd_status)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config, overrides=args.overrides)
    ensure_nh_ceps_config(cfg)
    configure_logging(cfg)
    return int(args.func(cfg, args))


if __name__ == "__main__":
    sys.exit(main())
