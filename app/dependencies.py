"""
QuoteDesk - FastAPI Dependencies

Shared dependencies for the process-wide quoting services.

This module provides dependency injection for:
1. The exchange-rate resolver
2. The in-memory quote session store
3. The supported currency directory
4. A single quote session looked up by path id

The objects themselves are created in main.lifespan and kept on app.state.
"""

from fastapi import Depends, Path, Request

from app.services.fx_service import CurrencyDirectory, RateResolver
from app.services.quote_session import QuoteSession, SessionStore


def get_resolver(request: Request) -> RateResolver:
    return request.app.state.rate_resolver


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_currency_directory(request: Request) -> CurrencyDirectory:
    return request.app.state.currency_directory


async def get_quote_session(
    session_id: str = Path(..., description="Quote session ID"),
    store: SessionStore = Depends(get_session_store),
) -> QuoteSession:
    """
    Resolve the session named in the path.

    Raises:
        SessionNotFoundException: unknown or deleted session id
    """
    return store.get(session_id)
