"""
QuoteDesk - Services Package

Business logic services.
"""

from app.services.discount_service import DiscountPolicy, effective_discount
from app.services.pricing_service import (
    PricingRow,
    PricingSummary,
    ProductSelection,
    Totals,
    build_summary_table,
    compute_rows,
    compute_totals,
)

# Display currency
from app.services.fx_providers import (
    FlatRatesProvider,
    NestedCurrencyProvider,
    RateProvider,
    ResultEnvelopeProvider,
)
from app.services.fx_service import (
    CurrencyDirectory,
    FetchState,
    RateResolver,
    RateSnapshot,
    RateState,
    convert,
)

from app.services.message_service import QuoteMessageInput, compose_message
from app.services.quote_session import QuoteSession, SessionStore, build_quote

__all__ = [
    "DiscountPolicy",
    "effective_discount",
    "PricingRow",
    "PricingSummary",
    "ProductSelection",
    "Totals",
    "build_summary_table",
    "compute_rows",
    "compute_totals",
    "FlatRatesProvider",
    "NestedCurrencyProvider",
    "RateProvider",
    "ResultEnvelopeProvider",
    "CurrencyDirectory",
    "FetchState",
    "RateResolver",
    "RateSnapshot",
    "RateState",
    "convert",
    "QuoteMessageInput",
    "compose_message",
    "QuoteSession",
    "SessionStore",
    "build_quote",
]
