"""
Per-field normalization of raw plan text into a `SupplierPlan`.

Every field resolves on its own; a missing or malformed value falls back to
the field's default and never aborts the record. The defaults are
deliberately not uniform:

- ``price_per_kwh`` collapses any failure to ``0``.
- ``percent_renewable`` stays unset when the text is empty and is ``0`` only
  when non-empty text does not parse.
- ``has_cancellation_fee`` is True unless the text is exactly ``"No"``, while
  the other booleans are False unless the text is exactly ``"Yes"``.
- ``last_updated`` stays unset when absent or unparsable.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

import structlog

from better_nh_energy.sources.nh_ceps.plans.extract import strip_prefix
from better_nh_energy.sources.nh_ceps.plans.model import RawPlanFields, SupplierPlan

logger = structlog.get_logger()

PRICE_PREFIX = "Per KWh: $"
LAST_UPDATE_PREFIX = "Last Update:"
PRICING_PREFIX = "Pricing:"
MONTHLY_CHARGE_PREFIX = "Monthly Charge:"
INTRO_PRICE_PREFIX = "Intro Price:"
CANCELLATION_FEE_PREFIX = "Cancellation Fee:"
RENEWABLE_PREFIX = "Renewable Energy:"
RATE_GOOD_FOR_PREFIX = "Rate Good for:"
RATE_END_PREFIX = "Rate End:"
COMMENTS_PREFIX = "Comments:"

# Leading decimal number; trailing text is ignored ("0.1234 per kWh" -> 0.1234).
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_PERCENT_RE = re.compile(r"\s*%$")
_MULTI_SPACE_RE = re.compile(r"\s\s+")

DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
)


def parse_number(text: Optional[str]) -> Optional[float]:
    """Parse the leading decimal number of `text`, or None if there is none."""
    if not text:
        return None
    match = _NUMBER_RE.match(text.strip())
    if not match:
        return None
    return float(match.group(0))


def parse_price(raw: Optional[str]) -> float:
    """Price per kWh; 0 when absent, empty or non-numeric."""
    value = parse_number(strip_prefix(raw, PRICE_PREFIX))
    return value if value is not None else 0.0


def parse_date(text: Optional[str]) -> Optional[date]:
    """Calendar date from one of `DATE_FORMATS`, or None when unparsable."""
    if not text:
        return None
    candidate = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    logger.debug("date_unparsable", text=candidate)
    return None


def parse_last_updated(raw: Optional[str]) -> Optional[date]:
    return parse_date(strip_prefix(raw, LAST_UPDATE_PREFIX))


def parse_renewable(raw: Optional[str]) -> Optional[float]:
    """
    Renewable share in percent.

    "45 %" -> 45.0, "" -> None (unset), "abc" -> 0.0.
    """
    text = strip_prefix(raw, RENEWABLE_PREFIX) or ""
    cleaned = _PERCENT_RE.sub("", text)
    if not cleaned:
        return None
    value = parse_number(cleaned)
    return value if value is not None else 0.0


def is_yes(raw: Optional[str], prefix: str) -> bool:
    """True only for exactly "Yes" after the label is stripped."""
    return strip_prefix(raw, prefix) == "Yes"


def has_fee(raw: Optional[str]) -> bool:
    """False only for exactly "No"; absent or any other text means a fee applies."""
    return strip_prefix(raw, CANCELLATION_FEE_PREFIX) != "No"


def collapse_whitespace(text: str) -> str:
    """Replace each run of two or more whitespace characters with one space."""
    return _MULTI_SPACE_RE.sub(" ", text)


def normalize_comments(raw: Optional[str]) -> Optional[str]:
    """Comments without the label; None (unset) for an absent or blank element."""
    if not raw:
        return None
    if raw.startswith(COMMENTS_PREFIX):
        return collapse_whitespace(raw[len(COMMENTS_PREFIX) :].strip())
    return collapse_whitespace(raw)


def normalize_plan(raw: RawPlanFields) -> SupplierPlan:
    """Build one `SupplierPlan` from raw field text; unset fields are left out."""
    plan: SupplierPlan = {
        "supplier_name": raw["supplier_name"],
        "plan_name": raw["plan_name"],
        "pricing_type": strip_prefix(raw["pricing_type"], PRICING_PREFIX),
        "is_intro_price": is_yes(raw["is_intro_price"], INTRO_PRICE_PREFIX),
        "has_cancellation_fee": has_fee(raw["has_cancellation_fee"]),
        "price_per_kwh": parse_price(raw["price_per_kwh"]),
    }

    last_updated = parse_last_updated(raw["last_updated"])
    if last_updated is not None:
        plan["last_updated"] = last_updated

    renewable = parse_renewable(raw["percent_renewable"])
    if renewable is not None:
        plan["percent_renewable"] = renewable

    plan["is_monthly_charge"] = is_yes(raw["is_monthly_charge"], MONTHLY_CHARGE_PREFIX)
    plan["rate_is_good_for"] = strip_prefix(
        raw["rate_is_good_for"], RATE_GOOD_FOR_PREFIX
    )
    plan["rate_end"] = strip_prefix(raw["rate_end"], RATE_END_PREFIX)

    comments = normalize_comments(raw["comments"])
    if comments is not None:
        plan["comments"] = comments

    found, href = raw["link"]
    if not found:
        plan["link"] = None
    elif href is not None:
        plan["link"] = href

    return plan


__all__ = [
    "parse_number",
    "parse_price",
    "parse_date",
    "parse_last_updated",
    "parse_renewable",
    "is_yes",
    "has_fee",
    "collapse_whitespace",
    "normalize_comments",
    "normalize_plan",
]
