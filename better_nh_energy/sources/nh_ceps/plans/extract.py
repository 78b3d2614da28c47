"""
Field extraction for one plan block of the NH comparison page.

Selectors are small value objects that render to CSS. Extraction only needs
a node that can answer ``select``/``select_one``/``get_text``/``get``
(`MarkupNode`), so the logic does not depend on a particular parser;
BeautifulSoup's ``Tag`` satisfies the protocol.

Helpers (`extract_field`, `extract_attribute`, `strip_prefix`,
`extract_raw_fields`) are factored out for granular testing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Union

from better_nh_energy.sources.nh_ceps.plans.model import RawPlanFields

_IDENT_RE = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")


class MarkupNode(Protocol):
    def select_one(self, selector: str) -> Optional["MarkupNode"]: ...

    def select(self, selector: str) -> Sequence["MarkupNode"]: ...

    def get_text(self) -> str: ...

    def get(self, key: str) -> Any: ...


def _ident(name: str) -> str:
    if not _IDENT_RE.match(name):
        raise ValueError(f"not a plain CSS identifier: {name!r}")
    return name


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class ByClass:
    """Exact class match, optionally narrowed to a descendant tag (``.CompanyName b``)."""

    name: str
    descendant: Optional[str] = None

    @property
    def css(self) -> str:
        css = f".{_ident(self.name)}"
        if self.descendant:
            css += f" {_ident(self.descendant)}"
        return css


@dataclass(frozen=True)
class ByAttrPrefix:
    """Attribute value starts with a literal, whatever the suffix (templated ids)."""

    attr: str
    prefix: str
    tag: Optional[str] = None

    @property
    def css(self) -> str:
        tag = _ident(self.tag) if self.tag else ""
        return f"{tag}[{_ident(self.attr)}^={_quote(self.prefix)}]"


@dataclass(frozen=True)
class ByAriaLabel:
    """Element whose ``aria-label`` equals ``label`` exactly."""

    label: str
    tag: str = "a"

    @property
    def css(self) -> str:
        return f"{_ident(self.tag)}[aria-label={_quote(self.label)}]"


Selector = Union[ByClass, ByAttrPrefix, ByAriaLabel]

PLAN_TABLE = ByClass("tblCompareList")

SUPPLIER_NAME = ByClass("CompanyName", descendant="b")
PLAN_NAME = ByClass("PlanName")
PRICE_PER_KWH = ByAttrPrefix("id", "MainContent_CompareSupplierID_lblKWh_", tag="span")
LAST_UPDATE = ByAttrPrefix(
    "id", "MainContent_CompareSupplierID_lblLastUpdate_", tag="span"
)
PRICING = ByClass("Pricing")
MONTHLY_FEE = ByClass("MonthlyFee")
INTRO_PRICE = ByClass("IntroPrice")
CANCELLATION_FEE = ByClass("CancellationFee")
RENEWABLE_ENERGY = ByClass("RenewableEnergy")
SIGN_UP_LINK = ByAriaLabel("Sign Up for Supplier Plan")
RATE_GOOD_FOR = ByClass("RateGoodFor")
RATE_END = ByClass("RateEnd")
COMMENTS = ByClass("Comments")


def find_all(node: MarkupNode, selector: Selector) -> list[MarkupNode]:
    """All descendants matching `selector`, in document order."""
    return list(node.select(selector.css))


def extract_field(block: MarkupNode, selector: Selector) -> Optional[str]:
    """Stripped text of the first descendant matching `selector`, or None."""
    el = block.select_one(selector.css)
    if el is None:
        return None
    return el.get_text().strip()


def extract_attribute(
    block: MarkupNode, selector: Selector, attr: str
) -> tuple[bool, Optional[str]]:
    """
    Return ``(found, value)`` for `attr` on the first match of `selector`.

    ``found`` is False when nothing matches; ``value`` is None when the element
    exists but lacks the attribute.
    """
    el = block.select_one(selector.css)
    if el is None:
        return False, None
    value = el.get(attr)
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    return True, value


def strip_prefix(text: Optional[str], prefix: str) -> Optional[str]:
    """
    Remove a literal label `prefix` (case-sensitive) and strip the remainder.

    Text that is None, empty, or does not start with `prefix` is returned
    unchanged.
    """
    if text and text.startswith(prefix):
        return text[len(prefix) :].strip()
    return text


def extract_raw_fields(block: MarkupNode) -> RawPlanFields:
    """Collect every field of one plan block; a missing element is None."""
    return {
        "supplier_name": extract_field(block, SUPPLIER_NAME),
        "plan_name": extract_field(block, PLAN_NAME),
        "price_per_kwh": extract_field(block, PRICE_PER_KWH),
        "last_updated": extract_field(block, LAST_UPDATE),
        "pricing_type": extract_field(block, PRICING),
        "is_monthly_charge": extract_field(block, MONTHLY_FEE),
        "is_intro_price": extract_field(block, INTRO_PRICE),
        "has_cancellation_fee": extract_field(block, CANCELLATION_FEE),
        "percent_renewable": extract_field(block, RENEWABLE_ENERGY),
        "rate_is_good_for": extract_field(block, RATE_GOOD_FOR),
        "rate_end": extract_field(block, RATE_END),
        "comments": extract_field(block, COMMENTS),
        "link": extract_attribute(block, SIGN_UP_LINK, "href"),
    }


__all__ = [
    "MarkupNode",
    "ByClass",
    "ByAttrPrefix",
    "ByAriaLabel",
    "Selector",
    "PLAN_TABLE",
    "find_all",
    "extract_field",
    "extract_attribute",
    "strip_prefix",
    "extract_raw_fields",
]
