"""
QuoteDesk - Quote Schemas

Pydantic schemas for the catalog, quote preview, FX and session endpoints.
Money is serialized as strings so Decimal precision survives JSON.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from app.config.catalog_config import PlanTier, Product, format_currency, quantize_money
from app.services.fx_service import RateSnapshot
from app.services.pricing_service import PricingRow, PricingSummary, Totals
from app.services.quote_session import QuoteResult

# Discount text is free-form: "12.5", " 7 ", "abc" and 12.5 are all accepted
DiscountValue = Union[str, float, None]


# ===========================================
# CATALOG
# ===========================================

class ProductResponse(BaseModel):
    """A catalog product with its monthly USD price per tier."""
    id: str
    name: str
    prices: Dict[str, str]

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            prices={tier.value: str(price) for tier, price in product.prices_by_tier.items()},
        )


class CatalogResponse(BaseModel):
    """Tiers (ordered) and products."""
    base_currency: str
    default_tier: str
    tiers: List[str]
    products: List[ProductResponse]


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class QuoteRequest(BaseModel):
    """Schema for a stateless quote preview."""
    merchant_name: str = Field("", max_length=255)
    tier: Optional[str] = Field(None, description="Plan tier name, e.g. 'Shopify Basic'")
    product_ids: List[str] = Field(default_factory=list, description="Selected products, in order")
    global_discount: DiscountValue = Field("0", description="Global percentage off")
    use_per_product: bool = False
    per_product_discounts: Dict[str, DiscountValue] = Field(default_factory=dict)
    currency: Optional[str] = Field(None, max_length=10, description="Optional display currency code")


class SessionUpdateRequest(BaseModel):
    """Schema for a partial session update; omitted fields stay unchanged."""
    merchant_name: Optional[str] = Field(None, max_length=255)
    tier: Optional[str] = None
    product_ids: Optional[List[str]] = None
    global_discount: DiscountValue = None
    use_per_product: Optional[bool] = None
    per_product_discounts: Optional[Dict[str, DiscountValue]] = None


class CurrencySelectRequest(BaseModel):
    """Schema for selecting a display currency (blank or null for USD only)."""
    currency: Optional[str] = Field(None, max_length=10)
    wait: bool = Field(False, description="Wait for the rate load before responding")


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class PricingRowResponse(BaseModel):
    product_id: str
    name: str
    actual: str
    discounted: str
    savings: str
    discount_pct: str
    actual_converted: Optional[str] = None
    discounted_converted: Optional[str] = None

    @classmethod
    def from_row(cls, row: PricingRow, rates: RateSnapshot) -> "PricingRowResponse":
        return cls(
            product_id=row.product_id,
            name=row.name,
            actual=str(quantize_money(row.actual)),
            discounted=str(quantize_money(row.discounted)),
            savings=str(quantize_money(row.savings)),
            discount_pct=str(row.discount_pct),
            actual_converted=_converted(row.actual, rates),
            discounted_converted=_converted(row.discounted, rates),
        )


class TotalsResponse(BaseModel):
    actual: str
    discounted: str
    savings: str

    @classmethod
    def from_totals(cls, totals: Totals) -> "TotalsResponse":
        return cls(
            actual=str(quantize_money(totals.actual)),
            discounted=str(quantize_money(totals.discounted)),
            savings=str(quantize_money(totals.savings)),
        )


class SummaryLineResponse(BaseModel):
    label: str
    actual: str
    discounted: str
    savings: str


class SummaryResponse(BaseModel):
    currency: str
    lines: List[SummaryLineResponse]
    totals: SummaryLineResponse

    @classmethod
    def from_summary(cls, summary: PricingSummary) -> "SummaryResponse":
        return cls(**summary.to_dict())


class RatesStatusResponse(BaseModel):
    """Display currency and freshness of its rate table."""
    currency: Optional[str] = None
    fetch_state: str
    rate: Optional[str] = None
    note: Optional[str] = None


class QuoteResponse(BaseModel):
    """Rows, totals, summary table and message for one set of inputs."""
    tier: str
    rows: List[PricingRowResponse]
    totals: TotalsResponse
    summary: SummaryResponse
    rates: RatesStatusResponse
    message: str


class SessionResponse(BaseModel):
    """Session inputs plus the derived quote."""
    id: str
    created_at: datetime
    merchant_name: str
    product_ids: List[str]
    global_discount: Optional[str] = None
    use_per_product: bool
    per_product_discounts: Dict[str, Optional[str]]
    quote: QuoteResponse


class ToggleResponse(BaseModel):
    product_id: str
    selected: bool
    product_ids: List[str]


class MessageResponse(BaseModel):
    message: str
    fetch_state: str
    note: Optional[str] = None


class CurrencyListResponse(BaseModel):
    loaded: bool
    currencies: List[str]


class RateTableResponse(BaseModel):
    """A resolved USD-base rate table."""
    base_currency: str
    currency: str
    rate: str
    rates: Dict[str, str]


def _converted(amount: Decimal, rates: RateSnapshot) -> Optional[str]:
    converted = rates.convert(amount)
    if converted is None:
        return None
    return format_currency(converted, rates.currency)


def rates_status(rates: RateSnapshot, note: Optional[str]) -> RatesStatusResponse:
    rate = rates.table.get(rates.currency) if rates.currency and rates.table else None
    return RatesStatusResponse(
        currency=rates.currency or None,
        fetch_state=rates.fetch_state.value,
        rate=str(rate) if rate is not None else None,
        note=note,
    )


def quote_response(result: QuoteResult, tier: PlanTier) -> QuoteResponse:
    """Serialize a QuoteResult for the API."""
    return QuoteResponse(
        tier=tier.value,
        rows=[PricingRowResponse.from_row(row, result.rates) for row in result.rows],
        totals=TotalsResponse.from_totals(result.totals),
        summary=SummaryResponse.from_summary(result.summary),
        rates=rates_status(result.rates, result.note),
        message=result.message,
    )
