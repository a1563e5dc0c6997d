"""
QuoteDesk - Routers Package

FastAPI route handlers.

Routers:
- catalog: Plan tiers and add-on products
- quotes: Stateless quote preview
- fx: Display currencies and exchange rates
- sessions: Interactive quoting sessions
"""

from app.routers import (
    catalog,
    quotes,
    fx,
    sessions,
)

__all__ = [
    "catalog",
    "quotes",
    "fx",
    "sessions",
]
