"""
Model definitions for NH supplier plans as parsed from the comparison page.

Design choices
--------------
- TypedDicts keep persistence ergonomic (JSON-friendly) while remaining
  static-type-checker friendly.
- Three states are distinguished per field: a value, ``None`` (serialized as
  JSON ``null``) and *unset* (the key is absent and omitted from JSON).
  ``last_updated``, ``percent_renewable`` and ``comments`` are the fields that
  can be unset; ``link`` is unset only when the sign-up anchor has no href.
- ``price_per_kwh`` never is ``None``: a missing or unparsable price is 0.
"""

from __future__ import annotations

from datetime import date
from typing import NotRequired, Optional, TypedDict


class SupplierPlan(TypedDict, total=False):
    """One normalized plan row from the comparison page."""

    supplier_name: Optional[str]
    plan_name: Optional[str]
    pricing_type: Optional[str]  # conventionally "Fixed" / "Variable"
    is_intro_price: bool
    has_cancellation_fee: bool
    price_per_kwh: float
    last_updated: NotRequired[date]
    percent_renewable: NotRequired[float]  # 0-100
    is_monthly_charge: bool
    rate_is_good_for: Optional[str]  # e.g. "12 months"
    rate_end: Optional[str]
    comments: NotRequired[str]
    link: NotRequired[Optional[str]]


class RawPlanFields(TypedDict):
    """Trimmed element text per field (labels still attached), ``None`` when absent."""

    supplier_name: Optional[str]
    plan_name: Optional[str]
    price_per_kwh: Optional[str]
    last_updated: Optional[str]
    pricing_type: Optional[str]
    is_monthly_charge: Optional[str]
    is_intro_price: Optional[str]
    has_cancellation_fee: Optional[str]
    percent_renewable: Optional[str]
    rate_is_good_for: Optional[str]
    rate_end: Optional[str]
    comments: Optional[str]
    # (anchor found, href or None)
    link: tuple[bool, Optional[str]]


# Output key order, shared by the serializer.
PLAN_FIELDS: tuple[str, ...] = (
    "supplier_name",
    "plan_name",
    "pricing_type",
    "is_intro_price",
    "has_cancellation_fee",
    "price_per_kwh",
    "last_updated",
    "percent_renewable",
    "is_monthly_charge",
    "rate_is_good_for",
    "rate_end",
    "comments",
    "link",
)

__all__ = ["SupplierPlan", "RawPlanFields", "PLAN_FIELDS"]
