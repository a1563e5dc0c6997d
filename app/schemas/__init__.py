"""
QuoteDesk - Schemas Package

Pydantic schemas for request/response validation.
"""

from app.schemas.quote import (
    CatalogResponse,
    CurrencyListResponse,
    CurrencySelectRequest,
    MessageResponse,
    ProductResponse,
    QuoteRequest,
    QuoteResponse,
    RateTableResponse,
    SessionResponse,
    SessionUpdateRequest,
    ToggleResponse,
)
