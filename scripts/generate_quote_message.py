"""
Generate a Quote Message
========================
Prints the pricing summary and the outreach message for a merchant, the same
text the API returns, without starting the server.

Usage:
    python scripts/generate_quote_message.py --product color_swatch_king_variants [options]

Options:
    --merchant NAME         Merchant name for the greeting (default: "there")
    --tier TIER             Plan tier, e.g. "Shopify Grow" (default: Shopify Basic)
    --product ID            Product id to include; repeat in the desired order
    --discount PCT          Global discount percentage (default: 0)
    --per-product ID=PCT    Per-product override; repeat; enables per-product mode
    --currency CODE         Also show amounts converted to CODE (live rates)
    --list                  List products and tiers, then exit
"""

import argparse
import asyncio
import sys

# Add project root to path
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.catalog_config import CATALOG, TIERS, format_currency, parse_tier
from app.services.discount_service import DiscountPolicy
from app.services.fx_service import RateResolver, RateState
from app.services.pricing_service import ProductSelection
from app.services.quote_session import build_quote
from app.utils.error_handling import AppException


def parse_override(value: str):
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"expected ID=PCT, got {value!r}")
    product_id, pct = value.split("=", 1)
    return product_id.strip(), pct


def print_catalog() -> None:
    print("Tiers:")
    for tier in TIERS:
        print(f"  {tier.value}")
    print("\nProducts:")
    for product in CATALOG:
        prices = ", ".join(
            f"{tier.value} {format_currency(price)}" for tier, price in product.prices_by_tier.items()
        )
        print(f"  {product.id}  ({product.name})")
        print(f"      {prices}")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a quote message for a merchant")
    parser.add_argument("--merchant", type=str, default="", help="Merchant name")
    parser.add_argument("--tier", type=str, default=None, help="Plan tier")
    parser.add_argument("--product", action="append", default=[], help="Product id (repeatable)")
    parser.add_argument("--discount", type=str, default="0", help="Global discount percentage")
    parser.add_argument(
        "--per-product", action="append", default=[], type=parse_override,
        help="Per-product override as ID=PCT (repeatable)",
    )
    parser.add_argument("--currency", type=str, default=None, help="Display currency code")
    parser.add_argument("--list", action="store_true", help="List products and tiers")
    args = parser.parse_args()

    if args.list:
        print_catalog()
        return 0

    try:
        tier = parse_tier(args.tier)
        product_ids = ProductSelection(args.product).ids
        policy = DiscountPolicy(
            global_input=args.discount,
            per_product_inputs=dict(args.per_product),
            use_per_product=bool(args.per_product),
        )
        rate_state = RateState(RateResolver())
        rates = await rate_state.select_currency(args.currency)
        result = build_quote(product_ids, tier, policy, merchant_name=args.merchant, rates=rates)
    except AppException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print("=" * 60)
    print(f"{'Product':<34}{'Actual':>9}{'Discounted':>11}{'Saved':>8}")
    print("-" * 60)
    for line in result.summary.lines + [result.summary.totals]:
        print(f"{line.label:<34}{line.actual:>9}{line.discounted:>11}{line.savings:>8}")
    print("=" * 60)
    if result.note:
        print(result.note)
    print()
    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
