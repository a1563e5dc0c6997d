"""
QuoteDesk - Quotes Router

Stateless quote preview: inputs in, rows + totals + summary + message out.

Endpoints:
- POST /api/v1/quotes/preview - Compute a quote, optionally with a display currency

An unavailable exchange rate never fails the request: the quote comes back
USD-only with fetch_state "error".
"""

import logging

from fastapi import APIRouter, Depends

from app.config.catalog_config import parse_tier
from app.dependencies import get_resolver
from app.schemas.quote import QuoteRequest, QuoteResponse, quote_response
from app.services.discount_service import DiscountPolicy
from app.services.fx_service import RateResolver, RateState
from app.services.pricing_service import ProductSelection
from app.services.quote_session import build_quote

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/preview", response_model=QuoteResponse)
async def preview_quote(
    data: QuoteRequest,
    resolver: RateResolver = Depends(get_resolver),
):
    """
    Compute a one-off quote.

    Unknown tiers and product ids are rejected before any rate lookup.
    """
    tier = parse_tier(data.tier)
    policy = DiscountPolicy(
        global_input=data.global_discount,
        per_product_inputs=dict(data.per_product_discounts),
        use_per_product=data.use_per_product,
    )
    product_ids = ProductSelection(data.product_ids).ids

    rate_state = RateState(resolver)
    rates = await rate_state.select_currency(data.currency)

    result = build_quote(
        product_ids,
        tier,
        policy,
        merchant_name=data.merchant_name,
        rates=rates,
    )
    logger.info(
        f"Quote preview: {len(result.rows)} products on {tier.value}, "
        f"currency={rates.currency or 'USD'} ({rates.fetch_state.value})"
    )
    return quote_response(result, tier)
