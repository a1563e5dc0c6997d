"""
QuoteDesk - Message Service

Composes the outreach message a support agent copies to the merchant.
The text is a pure function of its inputs: identical inputs always give
byte-identical output.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Sequence

from app.config.catalog_config import (
    BASE_CURRENCY,
    DEFAULT_TIER,
    PlanTier,
    format_currency,
    format_percentage,
)
from app.services.pricing_service import PricingRow, Totals

Converter = Callable[[Decimal], Optional[Decimal]]


def _no_conversion(amount: Decimal) -> Optional[Decimal]:
    return None


@dataclass(frozen=True)
class QuoteMessageInput:
    """Everything the message depends on."""
    rows: Sequence[PricingRow]
    totals: Totals
    tier: PlanTier = DEFAULT_TIER
    merchant_name: str = ""
    global_discount: Decimal = Decimal("0")
    use_per_product: bool = False
    currency: str = ""
    converter: Converter = _no_conversion
    fallback_greeting: str = "there"


def greeting_name(merchant_name: Optional[str], fallback: str = "there") -> str:
    name = (merchant_name or "").strip()
    return name or fallback


def format_amount(amount: Decimal, currency: str, converter: Converter) -> str:
    """USD amount, with the converted amount in brackets when one is available."""
    usd = format_currency(amount, BASE_CURRENCY)
    converted = converter(amount) if currency else None
    if converted is None:
        return usd
    return f"{usd} ({format_currency(converted, currency)})"


def discount_header(use_per_product: bool, global_discount: Decimal) -> str:
    if use_per_product:
        return "Once I have applied the discounts, the prices will be revised to:"
    return (
        f"Once I have applied the {format_percentage(global_discount)} discount, "
        "the prices will be revised to:"
    )


def compose_message(data: QuoteMessageInput) -> str:
    """
    Build the multi-line offer message.

    Sections: greeting, actual prices per product, discount header,
    discounted prices with each product's percentage, totals sentence.
    """
    name = greeting_name(data.merchant_name, data.fallback_greeting)

    def amount(value: Decimal) -> str:
        return format_amount(value, data.currency, data.converter)

    actual_lines = "\n".join(
        f"{row.name}: {amount(row.actual)}" for row in data.rows
    )
    discounted_lines = "\n".join(
        f"{row.name}: {amount(row.discounted)} — {format_percentage(row.discount_pct)} off"
        for row in data.rows
    )

    return (
        f"Hi {name},\n"
        "\n"
        f"I see that you are currently on the {data.tier.value} plan, and thus, "
        "the pricing for you will be as follows:\n"
        f"{actual_lines}\n"
        "\n"
        f"{discount_header(data.use_per_product, data.global_discount)}\n"
        f"{discounted_lines}\n"
        "\n"
        f"This means you will pay {amount(data.totals.discounted)} per month "
        f"instead of {amount(data.totals.actual)}, "
        f"saving a total of {amount(data.totals.savings)}\n"
        "\n"
        "Please let me know if you would like me to go ahead and apply this discount for you"
    )
