"""
QuoteDesk - Message Service Tests

Tests for the outreach message text.
"""

import pytest
from decimal import Decimal

from app.config.catalog_config import PlanTier, get_product
from app.services.discount_service import DiscountPolicy
from app.services.fx_service import FetchState, RateSnapshot
from app.services.message_service import (
    QuoteMessageInput,
    compose_message,
    discount_header,
    format_amount,
    greeting_name,
)
from app.services.pricing_service import compute_rows, compute_totals


SWATCH = "color_swatch_king_variants"
DESCRIPTIONS = "variant_descriptions_king"


def build_input(product_ids, policy, tier=PlanTier.SHOPIFY_BASIC, **kwargs) -> QuoteMessageInput:
    rows = compute_rows([get_product(p) for p in product_ids], tier, policy)
    return QuoteMessageInput(
        rows=rows,
        totals=compute_totals(rows),
        tier=tier,
        global_discount=policy.global_percentage,
        use_per_product=policy.use_per_product,
        **kwargs,
    )


class TestComposeMessage:
    """Tests for the full message layout."""

    def test_single_product_usd_only(self, global_ten_policy):
        message = compose_message(build_input([SWATCH], global_ten_policy, merchant_name="Jane"))

        assert message == (
            "Hi Jane,\n"
            "\n"
            "I see that you are currently on the Shopify Basic plan, and thus, "
            "the pricing for you will be as follows:\n"
            "Color Swatch King: Variants: $14.90\n"
            "\n"
            "Once I have applied the 10% discount, the prices will be revised to:\n"
            "Color Swatch King: Variants: $13.41 — 10% off\n"
            "\n"
            "This means you will pay $13.41 per month instead of $14.90, saving a total of $1.49\n"
            "\n"
            "Please let me know if you would like me to go ahead and apply this discount for you"
        )

    def test_deterministic(self, global_ten_policy):
        data = build_input([SWATCH, DESCRIPTIONS], global_ten_policy, merchant_name="Jane")
        assert compose_message(data) == compose_message(data)

    def test_products_listed_in_selection_order(self, global_ten_policy):
        message = compose_message(build_input([DESCRIPTIONS, SWATCH], global_ten_policy))
        assert message.index("Variant Descriptions King:") < message.index("Color Swatch King: Variants:")

    def test_per_product_header_and_percentages(self):
        policy = DiscountPolicy(
            global_input="10",
            per_product_inputs={SWATCH: "25"},
            use_per_product=True,
        )
        message = compose_message(build_input([SWATCH, DESCRIPTIONS], policy))

        assert "Once I have applied the discounts, the prices will be revised to:" in message
        assert "Color Swatch King: Variants: $11.18 — 25% off" in message
        assert "Variant Descriptions King: $8.91 — 10% off" in message

    def test_blank_name_uses_fallback(self, global_ten_policy):
        message = compose_message(build_input([SWATCH], global_ten_policy, merchant_name="   "))
        assert message.startswith("Hi there,\n")

    def test_explicit_fallback_greeting(self, global_ten_policy):
        message = compose_message(build_input([SWATCH], global_ten_policy, fallback_greeting="team"))
        assert message.startswith("Hi team,\n")

    def test_converted_amounts(self, global_ten_policy):
        rates = RateSnapshot(
            currency="AED",
            table={"AED": Decimal("3.6725")},
            fetch_state=FetchState.READY,
        )
        message = compose_message(build_input(
            [SWATCH],
            global_ten_policy,
            merchant_name="Jane",
            currency=rates.currency,
            converter=rates.convert,
        ))

        assert "Color Swatch King: Variants: $14.90 (AED 54.72)" in message
        assert "$13.41 (AED 49.25) — 10% off" in message
        assert "saving a total of $1.49 (AED 5.47)" in message

    def test_missing_rate_omits_annotation(self, global_ten_policy):
        rates = RateSnapshot(currency="GBP", table={"AED": Decimal("3.6725")}, fetch_state=FetchState.ERROR)
        message = compose_message(build_input(
            [SWATCH],
            global_ten_policy,
            currency=rates.currency,
            converter=rates.convert,
        ))

        assert "(" not in message
        assert "$13.41 per month instead of $14.90" in message


class TestMessageHelpers:
    """Tests for the message building blocks."""

    @pytest.mark.parametrize("name,expected", [
        ("Jane", "Jane"),
        ("  Jane  ", "Jane"),
        ("", "there"),
        (None, "there"),
    ])
    def test_greeting_name(self, name, expected):
        assert greeting_name(name, fallback="there") == expected

    def test_header_rounds_global_percentage(self):
        assert discount_header(False, Decimal("12.25")) == (
            "Once I have applied the 12.3% discount, the prices will be revised to:"
        )

    def test_format_amount_without_currency_ignores_converter(self):
        assert format_amount(Decimal("14.9"), "", lambda amount: amount * 2) == "$14.90"

    def test_format_amount_with_zero_conversion(self):
        assert format_amount(Decimal("0"), "EUR", lambda amount: Decimal("0")) == "$0.00 (€0.00)"
