from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from better_nh_energy.sources.nh_ceps.plans.model import SupplierPlan
from better_nh_energy.sources.nh_ceps.plans.parser import parse_supplier_plans
from better_nh_energy.sources.nh_ceps.plans.persistence import (
    load_supplier_plans,
    output_path_for,
    plan_from_json,
    plan_to_json,
    save_supplier_plans,
)


@pytest.fixture
def sample_plan() -> SupplierPlan:
    return {
        "supplier_name": "Acme",
        "plan_name": "Fixed 12",
        "pricing_type": "Fixed",
        "is_intro_price": False,
        "has_cancellation_fee": True,
        "price_per_kwh": 0.1234,
        "last_updated": date(2025, 4, 29),
        "percent_renewable": 45.0,
        "is_monthly_charge": False,
        "rate_is_good_for": "12 months",
        "rate_end": None,
        "comments": "Énergie verte",
        "link": None,
    }


def test_plan_to_json_serializes_dates_and_keeps_nulls(sample_plan: SupplierPlan) -> None:
    obj = plan_to_json(sample_plan)
    assert obj["last_updated"] == "2025-04-29"
    assert obj["rate_end"] is None
    assert obj["link"] is None
    assert list(obj)[0] == "supplier_name"


def test_unset_fields_are_omitted() -> None:
    plan: SupplierPlan = {"supplier_name": None, "price_per_kwh": 0.0}
    assert plan_to_json(plan) == {"supplier_name": None, "price_per_kwh": 0.0}


def test_save_then_load_roundtrip(tmp_path: Path, sample_plan: SupplierPlan) -> None:
    path = save_supplier_plans([sample_plan], tmp_path / "data", "Eversource")

    assert path == tmp_path / "data" / "supplier_data_Eversource.json"
    loaded = load_supplier_plans(path)
    assert loaded == [sample_plan]


def test_roundtrip_of_parsed_page(tmp_path: Path, sample_html: str) -> None:
    plans = parse_supplier_plans(sample_html)
    path = save_supplier_plans(plans, tmp_path, "Unitil")
    assert load_supplier_plans(path) == plans


def test_written_json_is_pretty_utf8(tmp_path: Path, sample_plan: SupplierPlan) -> None:
    path = save_supplier_plans([sample_plan], tmp_path, "NHEC")
    raw = path.read_text(encoding="utf-8")
    assert "Énergie verte" in raw
    assert '\n    "plan_name": "Fixed 12",\n' in raw
    assert json.loads(raw)[0]["price_per_kwh"] == 0.1234


def test_save_replaces_previous_file(tmp_path: Path, sample_plan: SupplierPlan) -> None:
    save_supplier_plans([sample_plan, sample_plan], tmp_path, "Liberty")
    path = save_supplier_plans([], tmp_path, "Liberty")
    assert load_supplier_plans(path) == []


def test_custom_filename_pattern(tmp_path: Path) -> None:
    assert output_path_for(tmp_path, "NHEC", "{provider}.json") == tmp_path / "NHEC.json"


def test_output_path_requires_provider(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        output_path_for(tmp_path, "")


def test_plan_from_json_drops_unparsable_date_and_unknown_keys() -> None:
    plan = plan_from_json({"last_updated": "garbage", "extra": 1, "plan_name": "X"})
    assert plan == {"plan_name": "X"}


def test_load_rejects_non_array(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"not": "a list"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_supplier_plans(path)
