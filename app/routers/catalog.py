"""
QuoteDesk - Catalog Router

Read-only view of the add-on catalog.

Endpoints:
- GET /api/v1/catalog - Tiers (ordered) and products with USD prices per tier
"""

from fastapi import APIRouter

from app.config.catalog_config import BASE_CURRENCY, CATALOG, DEFAULT_TIER, TIERS
from app.schemas.quote import CatalogResponse, ProductResponse

router = APIRouter()


@router.get("", response_model=CatalogResponse)
async def get_catalog():
    """Get every plan tier and product, in display order."""
    return CatalogResponse(
        base_currency=BASE_CURRENCY,
        default_tier=DEFAULT_TIER.value,
        tiers=[tier.value for tier in TIERS],
        products=[ProductResponse.from_product(product) for product in CATALOG],
    )
