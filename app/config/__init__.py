"""
QuoteDesk - Configuration Package

Application settings and the static product catalog.
Both `from app.config import settings` and
`from app.config.catalog_config import ...` work.
"""

from app.config.settings import Settings, get_settings, settings

from app.config.catalog_config import (
    BASE_CURRENCY,
    CATALOG,
    DEFAULT_TIER,
    TIERS,
    PlanTier,
    Product,
    get_product,
    get_products,
    parse_tier,
    quantize_money,
    format_currency,
    format_percentage,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    "get_settings",
    # Catalog
    "BASE_CURRENCY",
    "CATALOG",
    "DEFAULT_TIER",
    "TIERS",
    "PlanTier",
    "Product",
    "get_product",
    "get_products",
    "parse_tier",
    "quantize_money",
    "format_currency",
    "format_percentage",
]
