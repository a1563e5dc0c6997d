"""
QuoteDesk - Quote Sessions Router

Interactive quoting sessions. Every change to a session's inputs is followed
by a full recomputation of its quote.

Endpoints:
- POST /api/v1/sessions - Start a session
- GET /api/v1/sessions/{session_id} - Session inputs and current quote
- PATCH /api/v1/sessions/{session_id} - Partial update of inputs
- DELETE /api/v1/sessions/{session_id} - End a session
- POST /api/v1/sessions/{session_id}/products/{product_id}/toggle - Select/deselect a product
- PUT /api/v1/sessions/{session_id}/currency - Select the display currency
- GET /api/v1/sessions/{session_id}/message - Current outreach message
"""

import logging

from fastapi import APIRouter, Depends, status

from app.dependencies import get_quote_session, get_session_store
from app.schemas.quote import (
    CurrencySelectRequest,
    MessageResponse,
    SessionResponse,
    SessionUpdateRequest,
    ToggleResponse,
    quote_response,
)
from app.services.quote_session import QuoteSession, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_response(session: QuoteSession) -> SessionResponse:
    policy = session.policy
    return SessionResponse(
        id=session.id,
        created_at=session.created_at,
        merchant_name=session.merchant_name,
        product_ids=session.selection.ids,
        global_discount=None if policy.global_input is None else str(policy.global_input),
        use_per_product=policy.use_per_product,
        per_product_discounts={
            product_id: None if value is None else str(value)
            for product_id, value in policy.per_product_inputs.items()
        },
        quote=quote_response(session.quote(), session.tier),
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    store: SessionStore = Depends(get_session_store),
):
    """Start a session on the default tier with nothing selected."""
    session = store.create()
    logger.info(f"Created quote session {session.id}")
    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session: QuoteSession = Depends(get_quote_session),
):
    return _session_response(session)


@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    data: SessionUpdateRequest,
    session: QuoteSession = Depends(get_quote_session),
):
    """
    Update merchant name, tier, selection or discounts.

    Only fields present in the body change. `product_ids` replaces the whole
    selection; per-product overrides are merged into the existing ones.
    """
    session.update(
        merchant_name=data.merchant_name,
        tier=data.tier,
        product_ids=data.product_ids,
        global_discount=data.global_discount,
        use_per_product=data.use_per_product,
        per_product_discounts=data.per_product_discounts,
    )
    return _session_response(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    store.delete(session_id)
    logger.info(f"Deleted quote session {session_id}")


@router.post("/{session_id}/products/{product_id}/toggle", response_model=ToggleResponse)
async def toggle_product(
    product_id: str,
    session: QuoteSession = Depends(get_quote_session),
):
    """Deselect the product if selected, otherwise append it to the selection."""
    selected = session.toggle_product(product_id)
    return ToggleResponse(
        product_id=product_id,
        selected=selected,
        product_ids=session.selection.ids,
    )


@router.put("/{session_id}/currency", response_model=SessionResponse)
async def select_currency(
    data: CurrencySelectRequest,
    session: QuoteSession = Depends(get_quote_session),
):
    """
    Select the display currency.

    By default the rate load runs in the background and the response shows
    fetch_state "loading"; with `wait` the response reflects the finished load.
    A newer selection always supersedes an in-flight one.
    """
    if data.wait:
        await session.select_currency(data.currency)
    else:
        session.schedule_currency(data.currency)
    return _session_response(session)


@router.get("/{session_id}/message", response_model=MessageResponse)
async def get_message(
    session: QuoteSession = Depends(get_quote_session),
):
    result = session.quote()
    return MessageResponse(
        message=result.message,
        fetch_state=result.rates.fetch_state.value,
        note=result.note,
    )
