"""
HTML parser for the NH residential supplier comparison page.

This module finds every plan block (``.tblCompareList``) in a page and turns
each into a `SupplierPlan`, preserving document order. A page without plan
blocks yields an empty list; it is not an error.
"""

from __future__ import annotations

import structlog
from bs4 import BeautifulSoup

from better_nh_energy.sources.nh_ceps.plans.extract import (
    PLAN_TABLE,
    MarkupNode,
    extract_raw_fields,
    find_all,
)
from better_nh_energy.sources.nh_ceps.plans.model import SupplierPlan
from better_nh_energy.sources.nh_ceps.plans.normalize import normalize_plan

logger = structlog.get_logger()


def scan(document: MarkupNode) -> list[MarkupNode]:
    """Return all plan blocks in `document`, in source order."""
    return find_all(document, PLAN_TABLE)


def parse_blocks(blocks: list[MarkupNode]) -> list[SupplierPlan]:
    """One plan per block, same order."""
    return [normalize_plan(extract_raw_fields(block)) for block in blocks]


def parse_supplier_plans(html: str | bytes) -> list[SupplierPlan]:
    """
    Parse a comparison page into supplier plans.

    Args:
        html: Raw markup of the page.

    Returns:
        Plans in document order; empty if the page has no plan tables.
    """
    soup = BeautifulSoup(html, "html.parser")
    blocks = scan(soup)
    if not blocks:
        logger.info("no_plan_tables_found", selector=PLAN_TABLE.css)
        return []
    return parse_blocks(blocks)


__all__ = ["scan", "parse_blocks", "parse_supplier_plans"]
