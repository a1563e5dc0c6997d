"""
QuoteDesk - Foreign Exchange (FX) Router

Display-currency support endpoints:
- GET /api/v1/fx/currencies - Selectable currency codes (common codes first)
- GET /api/v1/fx/rates/{code} - Resolve a USD-base rate table containing `code`

Billing is always in USD; these rates are indicative only.
"""

from fastapi import APIRouter, Depends, Path

from app.config.catalog_config import BASE_CURRENCY
from app.dependencies import get_currency_directory, get_resolver
from app.schemas.quote import CurrencyListResponse, RateTableResponse
from app.services.fx_providers import is_currency_code
from app.services.fx_service import CurrencyDirectory, RateResolver, normalize_currency_code
from app.utils.error_handling import InvalidCurrencyException

router = APIRouter()


@router.get("/currencies", response_model=CurrencyListResponse)
async def list_currencies(
    directory: CurrencyDirectory = Depends(get_currency_directory),
):
    """
    Get the selectable display currencies.

    Served from the list loaded at startup; loads it now if that has not
    completed yet.
    """
    if not directory.loaded:
        await directory.load()
    return CurrencyListResponse(loaded=directory.loaded, currencies=directory.codes)


@router.get("/rates/{code}", response_model=RateTableResponse)
async def get_rates(
    code: str = Path(..., min_length=3, max_length=3, description="Target currency code"),
    resolver: RateResolver = Depends(get_resolver),
):
    """
    Resolve the first acceptable USD rate table that contains `code`.

    Returns 502 NO_RATE_PROVIDER_AVAILABLE when every provider fails.
    """
    want = normalize_currency_code(code)
    if not is_currency_code(want):
        raise InvalidCurrencyException(code)

    table = await resolver.resolve_rates(want)
    return RateTableResponse(
        base_currency=BASE_CURRENCY,
        currency=want,
        rate=str(table[want]),
        rates={key: str(value) for key, value in sorted(table.items())},
    )
