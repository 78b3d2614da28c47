"""
Persistence helpers for supplier plan data.

One JSON array per provider, e.g. ``<output_dir>/supplier_data_Eversource.json``.
Keys follow `PLAN_FIELDS` order; unset fields are omitted, ``None`` becomes
``null`` and dates are written as ISO-8601 ``YYYY-MM-DD``. Each save fully
replaces the previous file.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Sequence, cast

from better_nh_energy.common.file_io import read_json, write_json
from better_nh_energy.common.types import JSONLike, JSONObj
from better_nh_energy.sources.nh_ceps.plans.model import PLAN_FIELDS, SupplierPlan
from better_nh_energy.sources.nh_ceps.plans.normalize import parse_date

DEFAULT_FILENAME = "supplier_data_{provider}.json"


def plan_to_json(plan: SupplierPlan) -> JSONObj:
    """JSON-ready dict for one plan."""
    out: JSONObj = {}
    for key in PLAN_FIELDS:
        if key not in plan:
            continue
        value: Any = plan[key]  # type: ignore[literal-required]
        out[key] = value.isoformat() if isinstance(value, date) else value
    return out


def plan_from_json(obj: JSONObj) -> SupplierPlan:
    """Inverse of `plan_to_json`; unknown keys are dropped."""
    plan: dict[str, Any] = {}
    for key in PLAN_FIELDS:
        if key not in obj:
            continue
        value = obj[key]
        if key == "last_updated":
            parsed = parse_date(value) if isinstance(value, str) else None
            if parsed is None:
                continue
            value = parsed
        plan[key] = value
    return cast(SupplierPlan, plan)


def plans_to_json(plans: Sequence[SupplierPlan]) -> list[JSONLike]:
    return [plan_to_json(p) for p in plans]


def plans_from_json(data: JSONLike) -> list[SupplierPlan]:
    if not isinstance(data, list):
        raise ValueError("supplier plan file must contain a JSON array")
    out: list[SupplierPlan] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"supplier plan #{i} is not a JSON object")
        out.append(plan_from_json(item))
    return out


def output_path_for(
    output_dir: Path, provider: str, filename: str = DEFAULT_FILENAME
) -> Path:
    """Target file for `provider` under `output_dir`."""
    if not provider:
        raise ValueError("provider must be a non-empty string")
    return output_dir / filename.format(provider=provider)


def save_supplier_plans(
    plans: Sequence[SupplierPlan],
    output_dir: Path,
    provider: str,
    *,
    filename: str = DEFAULT_FILENAME,
) -> Path:
    """
    Write the plans for one provider, replacing any previous file.

    Args:
        plans: Plans in document order.
        output_dir: Directory receiving one file per provider.
        provider: Provider choice (used in the file name).
        filename: Pattern with a ``{provider}`` placeholder.

    Returns:
        Path of the written file.
    """
    path = output_path_for(output_dir, provider, filename)
    return write_json(path, plans_to_json(plans))


def load_supplier_plans(path: Path) -> list[SupplierPlan]:
    """Read a provider file written by `save_supplier_plans`."""
    return plans_from_json(read_json(path))


__all__ = [
    "DEFAULT_FILENAME",
    "plan_to_json",
    "plan_from_json",
    "plans_to_json",
    "plans_from_json",
    "output_path_for",
    "save_supplier_plans",
    "load_supplier_plans",
]
