"""
Tests for per-field normalization policies.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

import pytest

from better_nh_energy.sources.nh_ceps.plans.model import RawPlanFields
from better_nh_energy.sources.nh_ceps.plans.normalize import (
    INTRO_PRICE_PREFIX,
    MONTHLY_CHARGE_PREFIX,
    collapse_whitespace,
    has_fee,
    is_yes,
    normalize_comments,
    normalize_plan,
    parse_date,
    parse_price,
    parse_renewable,
)


def _raw(**fields: object) -> RawPlanFields:
    base: dict[str, object] = {
        "supplier_name": None,
        "plan_name": None,
        "price_per_kwh": None,
        "last_updated": None,
        "pricing_type": None,
        "is_monthly_charge": None,
        "is_intro_price": None,
        "has_cancellation_fee": None,
        "percent_renewable": None,
        "rate_is_good_for": None,
        "rate_end": None,
        "comments": None,
        "link": (False, None),
    }
    base.update(fields)
    return base  # type: ignore[return-value]


# ----- price --------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Per KWh: $0.1234", 0.1234),
        ("Per KWh: $ 0.0999", 0.0999),
        ("Per KWh: $0.12 (fixed)", 0.12),
        ("0.15", 0.15),
        ("Per KWh: $", 0.0),
        ("Per KWh: $call", 0.0),
        ("$0.12", 0.0),
        ("", 0.0),
        (None, 0.0),
    ],
)
def test_parse_price(raw: Optional[str], expected: float) -> None:
    assert parse_price(raw) == pytest.approx(expected)


# ----- dates ----------------------------------------------------------------------


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("4/29/2025", date(2025, 4, 29)),
        ("04/29/2025", date(2025, 4, 29)),
        ("4/29/25", date(2025, 4, 29)),
        ("2025-04-29", date(2025, 4, 29)),
        ("April 29, 2025", date(2025, 4, 29)),
        ("Apr 29, 2025", date(2025, 4, 29)),
        ("4/29/2025 10:15:00 AM", date(2025, 4, 29)),
        ("  4/29/2025  ", date(2025, 4, 29)),
    ],
)
def test_parse_date_accepts_known_formats(text: str, expected: date) -> None:
    assert parse_date(text) == expected


@pytest.mark.parametrize("text", ["not posted", "13/45/2025", "", None])
def test_parse_date_unparsable_is_none(text: Optional[str]) -> None:
    assert parse_date(text) is None


# ----- renewable ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Renewable Energy: 45 %", 45.0),
        ("Renewable Energy: 45%", 45.0),
        ("Renewable Energy: 12.5 %", 12.5),
        ("45 %", 45.0),
        ("Renewable Energy: abc", 0.0),
        ("abc", 0.0),
        ("Renewable Energy: 0 %", 0.0),
    ],
)
def test_parse_renewable_values(raw: str, expected: float) -> None:
    assert parse_renewable(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["Renewable Energy:", "Renewable Energy: %", "", None])
def test_parse_renewable_empty_is_unset(raw: Optional[str]) -> None:
    assert parse_renewable(raw) is None


# ----- booleans -------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Monthly Charge: Yes", True),
        ("Yes", True),
        ("Monthly Charge: No", False),
        ("Monthly Charge: yes", False),
        ("Monthly Charge: YES", False),
        ("Monthly Charge:", False),
        ("", False),
        (None, False),
    ],
)
def test_is_yes_exact_match(raw: Optional[str], expected: bool) -> None:
    assert is_yes(raw, MONTHLY_CHARGE_PREFIX) is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Cancellation Fee: No", False),
        ("No", False),
        ("Cancellation Fee: Yes", True),
        ("Cancellation Fee: no", True),
        ("Cancellation Fee: $150", True),
        ("Cancellation Fee:", True),
        ("", True),
        (None, True),
    ],
)
def test_has_fee_is_true_unless_exactly_no(raw: Optional[str], expected: bool) -> None:
    assert has_fee(raw) is expected


# ----- comments -------------------------------------------------------------------


def test_collapse_whitespace_keeps_single_whitespace() -> None:
    assert collapse_whitespace("a  b\n\n c\td") == "a b c\td"


def test_normalize_comments_strips_label_and_collapses() -> None:
    assert (
        normalize_comments("Comments:   No   deposit.\n    Locked.")
        == "No deposit. Locked."
    )


def test_normalize_comments_without_label() -> None:
    assert normalize_comments("Call  us") == "Call us"


def test_normalize_comments_label_only_is_empty_string() -> None:
    assert normalize_comments("Comments:") == ""


@pytest.mark.parametrize("raw", ["", None])
def test_normalize_comments_absent_or_empty_is_unset(raw: Optional[str]) -> None:
    assert normalize_comments(raw) is None


# ----- whole record ---------------------------------------------------------------


def test_normalize_plan_all_missing_uses_defaults() -> None:
    plan = normalize_plan(_raw())

    assert plan == {
        "supplier_name": None,
        "plan_name": None,
        "pricing_type": None,
        "is_intro_price": False,
        "has_cancellation_fee": True,
        "price_per_kwh": 0.0,
        "is_monthly_charge": False,
        "rate_is_good_for": None,
        "rate_end": None,
        "link": None,
    }
    assert "last_updated" not in plan
    assert "percent_renewable" not in plan
    assert "comments" not in plan


def test_normalize_plan_full_record() -> None:
    plan = normalize_plan(
        _raw(
            supplier_name="Acme",
            plan_name="Fixed 12",
            price_per_kwh="Per KWh: $0.1234",
            last_updated="Last Update: 4/29/2025",
            pricing_type="Pricing: Fixed",
            is_monthly_charge="Monthly Charge: Yes",
            is_intro_price="Intro Price: Yes",
            has_cancellation_fee="Cancellation Fee: No",
            percent_renewable="Renewable Energy: 45 %",
            rate_is_good_for="Rate Good for: 12 months",
            rate_end="Rate End: 06/2026",
            comments="Comments: Great  plan",
            link=(True, "https://example.test/signup"),
        )
    )

    assert plan["supplier_name"] == "Acme"
    assert plan["plan_name"] == "Fixed 12"
    assert plan["price_per_kwh"] == pytest.approx(0.1234)
    assert plan["last_updated"] == date(2025, 4, 29)
    assert plan["pricing_type"] == "Fixed"
    assert plan["is_monthly_charge"] is True
    assert plan["is_intro_price"] is True
    assert plan["has_cancellation_fee"] is False
    assert plan["percent_renewable"] == 45.0
    assert plan["rate_is_good_for"] == "12 months"
    assert plan["rate_end"] == "06/2026"
    assert plan["comments"] == "Great plan"
    assert plan["link"] == "https://example.test/signup"


def test_normalize_plan_unparsable_date_is_unset() -> None:
    plan = normalize_plan(_raw(last_updated="Last Update: soon"))
    assert "last_updated" not in plan


def test_normalize_plan_anchor_without_href_leaves_link_unset() -> None:
    plan = normalize_plan(_raw(link=(True, None)))
    assert "link" not in plan


def test_intro_price_prefix_is_stripped() -> None:
    assert is_yes("Intro Price: Yes", INTRO_PRICE_PREFIX) is True
    assert is_yes("Intro Price: No", INTRO_PRICE_PREFIX) is False
