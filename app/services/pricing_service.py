"""
QuoteDesk - Pricing Service

Computes actual and discounted monthly prices for the selected products:
- Per-product pricing rows in selection order
- Aggregate totals (actual, discounted, savings)
- Display summary table (USD, rounded) with a totals row

Rows and totals are recomputed from scratch on every call; inputs are small.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from app.config.catalog_config import (
    BASE_CURRENCY,
    PlanTier,
    Product,
    get_product,
    quantize_money,
)
from app.services.discount_service import DiscountPolicy

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class PricingRow:
    """Pricing for one selected product (full precision, USD)."""
    product_id: str
    name: str
    actual: Decimal
    discounted: Decimal
    discount_pct: Decimal

    @property
    def savings(self) -> Decimal:
        return self.actual - self.discounted


@dataclass(frozen=True)
class Totals:
    """Sums over the selected rows (full precision, USD)."""
    actual: Decimal
    discounted: Decimal
    savings: Decimal


@dataclass(frozen=True)
class SummaryLine:
    """One display line of the pricing summary table (rounded, USD)."""
    label: str
    actual: Decimal
    discounted: Decimal
    savings: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "actual": str(self.actual),
            "discounted": str(self.discounted),
            "savings": str(self.savings),
        }


@dataclass(frozen=True)
class PricingSummary:
    """Tabular pricing summary handed to presentation collaborators."""
    currency: str
    lines: List[SummaryLine]
    totals: SummaryLine

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency,
            "lines": [line.to_dict() for line in self.lines],
            "totals": self.totals.to_dict(),
        }


# =============================================================================
# SELECTION
# =============================================================================

class ProductSelection:
    """
    Ordered, duplicate-free sequence of selected product ids.

    Toggling removes an id if present and appends it otherwise, so row order
    follows the order in which products were picked.
    """

    def __init__(self, product_ids: Iterable[str] = ()):
        self._ids: List[str] = []
        for product_id in product_ids:
            if product_id not in self._ids:
                get_product(product_id)
                self._ids.append(product_id)

    def toggle(self, product_id: str) -> bool:
        """Toggle a product; returns True when it is now selected."""
        if product_id in self._ids:
            self._ids.remove(product_id)
            return False
        get_product(product_id)
        self._ids.append(product_id)
        return True

    def replace(self, product_ids: Iterable[str]) -> None:
        """Replace the whole selection, keeping first occurrences."""
        self._ids = ProductSelection(product_ids).ids

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def products(self) -> List[Product]:
        return [get_product(product_id) for product_id in self._ids]

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)


# =============================================================================
# PRICING ENGINE
# =============================================================================

def compute_rows(
    selected_products: Sequence[Product],
    tier: PlanTier,
    policy: DiscountPolicy,
) -> List[PricingRow]:
    """
    Pricing rows for the selected products at the given tier.

    discounted = actual * (1 - effective_discount / 100)
    """
    rows = []
    for product in selected_products:
        actual = product.price_for(tier)
        discount_pct = policy.discount_for(product.id)
        discounted = actual * (1 - discount_pct / HUNDRED)
        rows.append(PricingRow(
            product_id=product.id,
            name=product.name,
            actual=actual,
            discounted=discounted,
            discount_pct=discount_pct,
        ))
    return rows


def compute_totals(rows: Sequence[PricingRow]) -> Totals:
    """Plain sums over the rows; savings = actual - discounted."""
    actual = sum((row.actual for row in rows), Decimal("0"))
    discounted = sum((row.discounted for row in rows), Decimal("0"))
    return Totals(actual=actual, discounted=discounted, savings=actual - discounted)


def build_summary_table(rows: Sequence[PricingRow], totals: Totals) -> PricingSummary:
    """USD summary table: product, actual, discounted, savings plus totals."""
    lines = [
        SummaryLine(
            label=row.name,
            actual=quantize_money(row.actual),
            discounted=quantize_money(row.discounted),
            savings=quantize_money(row.savings),
        )
        for row in rows
    ]
    totals_line = SummaryLine(
        label="Totals",
        actual=quantize_money(totals.actual),
        discounted=quantize_money(totals.discounted),
        savings=quantize_money(totals.savings),
    )
    return PricingSummary(currency=BASE_CURRENCY, lines=lines, totals=totals_line)
