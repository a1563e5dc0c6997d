"""
QuoteDesk - Catalog Configuration

Static add-on catalog: every product priced per Shopify plan tier.
Pricing in US Dollars (USD), the fixed base currency for all quotes.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional, Tuple, Union
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from app.utils.error_handling import (
    CatalogIntegrityException,
    InvalidTierException,
    ProductNotFoundException,
)


BASE_CURRENCY = "USD"

CENT = Decimal("0.01")
TENTH = Decimal("0.1")


# =============================================================================
# ENUMS
# =============================================================================

class PlanTier(str, Enum):
    """
    Shopify plan tiers, in display order.

    The merchant's current plan selects which price column applies.
    """
    PAUSE_AND_BUILD = "Pause and Build"
    SHOPIFY_BASIC = "Shopify Basic"
    SHOPIFY_GROW = "Shopify Grow"
    SHOPIFY_ADVANCED = "Shopify Advanced"
    SHOPIFY_PLUS = "Shopify Plus"


TIERS: Tuple[PlanTier, ...] = tuple(PlanTier)
DEFAULT_TIER = PlanTier.SHOPIFY_BASIC


# =============================================================================
# PRODUCT CATALOG
# =============================================================================

@dataclass(frozen=True)
class Product:
    """An add-on app with a monthly USD price per plan tier."""
    id: str
    name: str
    prices_by_tier: Mapping[PlanTier, Decimal]

    def price_for(self, tier: PlanTier) -> Decimal:
        """Monthly USD price for a tier. Missing tiers break catalog integrity."""
        try:
            return self.prices_by_tier[tier]
        except KeyError:
            raise CatalogIntegrityException(self.id, getattr(tier, "value", str(tier))) from None


def _prices(
    pause_and_build: str,
    basic: str,
    grow: str,
    advanced: str,
    plus: str,
) -> Mapping[PlanTier, Decimal]:
    return MappingProxyType({
        PlanTier.PAUSE_AND_BUILD: Decimal(pause_and_build),
        PlanTier.SHOPIFY_BASIC: Decimal(basic),
        PlanTier.SHOPIFY_GROW: Decimal(grow),
        PlanTier.SHOPIFY_ADVANCED: Decimal(advanced),
        PlanTier.SHOPIFY_PLUS: Decimal(plus),
    })


CATALOG: Tuple[Product, ...] = (
    Product(
        id="color_swatch_king_variants",
        name="Color Swatch King: Variants",
        prices_by_tier=_prices("5.00", "14.90", "29.90", "49.90", "99.90"),
    ),
    Product(
        id="sa_variants_combined_listings",
        name="SA Variants: Combined Listings",
        prices_by_tier=_prices("5.00", "14.90", "29.90", "49.90", "99.90"),
    ),
    Product(
        id="sa_variant_image_automator",
        name="SA Variant Image Automator",
        prices_by_tier=_prices("5.00", "9.90", "24.90", "24.90", "49.90"),
    ),
    Product(
        id="variant_descriptions_king",
        name="Variant Descriptions King",
        prices_by_tier=_prices("5.00", "9.90", "9.90", "9.90", "9.90"),
    ),
)

_PRODUCTS_BY_ID: Dict[str, Product] = {product.id: product for product in CATALOG}


def get_product(product_id: str) -> Product:
    """Look up a catalog product by id."""
    product = _PRODUCTS_BY_ID.get(product_id)
    if product is None:
        raise ProductNotFoundException(product_id)
    return product


def get_products(product_ids: List[str]) -> List[Product]:
    """Look up several products, keeping the given order."""
    return [get_product(product_id) for product_id in product_ids]


def parse_tier(value: Union[str, PlanTier, None]) -> PlanTier:
    """
    Resolve a tier from its display name or enum member name.

    Accepts "Shopify Basic" as well as "SHOPIFY_BASIC"; None gives the default tier.
    """
    if value is None:
        return DEFAULT_TIER
    if isinstance(value, PlanTier):
        return value
    text = str(value).strip()
    for tier in PlanTier:
        if text.lower() in (tier.value.lower(), tier.name.lower()):
            return tier
    raise InvalidTierException(text, [tier.value for tier in PlanTier])


# =============================================================================
# DISPLAY FORMATTING
# =============================================================================

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "NGN": "₦",
    "KRW": "₩",
    "ILS": "₪",
    "PHP": "₱",
    "VND": "₫",
}


def quantize_money(amount: Decimal) -> Decimal:
    """Round to display precision (2 decimal places, half up)."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, currency: Optional[str] = BASE_CURRENCY) -> str:
    """Format an amount in the given currency, e.g. $1,234.50 or AED 54.72."""
    code = (currency or BASE_CURRENCY).upper()
    rounded = quantize_money(amount)
    sign = "-" if rounded < 0 else ""
    body = f"{abs(rounded):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{body}"
    return f"{sign}{code} {body}"


def format_percentage(value: Decimal) -> str:
    """One decimal place, dropping a trailing .0: 10 -> 10%, 12.25 -> 12.3%."""
    rounded = Decimal(value).quantize(TENTH, rounding=ROUND_HALF_UP)
    if rounded == rounded.to_integral_value():
        return f"{rounded.to_integral_value():f}%"
    return f"{rounded:f}%"
