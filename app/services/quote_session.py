"""
QuoteDesk - Quote Session Service

An interactive quoting session owns the user's inputs (merchant name, tier,
ordered product selection, discount policy, display currency) and derives
rows, totals, summary table and message from them on demand.

Rate loads triggered by currency selection run as background tasks; the
session's RateState drops results from superseded selections.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from app.config.catalog_config import PlanTier, get_product, get_products, parse_tier
from app.config.settings import get_settings
from app.services.discount_service import DiscountInput, DiscountPolicy
from app.services.fx_service import (
    FetchState,
    RateResolver,
    RateSnapshot,
    RateState,
    advisory_note,
)
from app.services.message_service import QuoteMessageInput, compose_message
from app.services.pricing_service import (
    PricingRow,
    PricingSummary,
    ProductSelection,
    Totals,
    build_summary_table,
    compute_rows,
    compute_totals,
)
from app.utils.error_handling import SessionNotFoundException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteResult:
    """Everything derived from one set of quote inputs."""
    rows: List[PricingRow]
    totals: Totals
    summary: PricingSummary
    message: str
    rates: RateSnapshot
    note: Optional[str]


def build_quote(
    product_ids: Iterable[str],
    tier: PlanTier,
    policy: DiscountPolicy,
    merchant_name: str = "",
    rates: Optional[RateSnapshot] = None,
) -> QuoteResult:
    """Derive rows, totals, summary and message for the given inputs."""
    rates = rates or RateSnapshot()
    rows = compute_rows(get_products(list(product_ids)), tier, policy)
    totals = compute_totals(rows)
    message = compose_message(QuoteMessageInput(
        rows=rows,
        totals=totals,
        tier=tier,
        merchant_name=merchant_name,
        global_discount=policy.global_percentage,
        use_per_product=policy.use_per_product,
        currency=rates.currency,
        converter=rates.convert,
        fallback_greeting=get_settings().fallback_greeting,
    ))
    return QuoteResult(
        rows=rows,
        totals=totals,
        summary=build_summary_table(rows, totals),
        message=message,
        rates=rates,
        note=advisory_note(rates),
    )


class QuoteSession:
    """Mutable quoting inputs for one agent, plus the session's rate state."""

    def __init__(self, resolver: RateResolver, tier: Optional[PlanTier] = None):
        self.id = uuid.uuid4().hex
        self.created_at = datetime.utcnow()
        self.merchant_name = ""
        self.tier = tier or parse_tier(get_settings().default_tier)
        self.selection = ProductSelection()
        self.policy = DiscountPolicy()
        self.rate_state = RateState(resolver)
        self._rate_tasks: Set[asyncio.Task] = set()

    # ---------------------------------------------------------------------
    # Inputs
    # ---------------------------------------------------------------------

    def update(
        self,
        merchant_name: Optional[str] = None,
        tier: Optional[str] = None,
        product_ids: Optional[List[str]] = None,
        global_discount: DiscountInput = None,
        use_per_product: Optional[bool] = None,
        per_product_discounts: Optional[Dict[str, DiscountInput]] = None,
    ) -> None:
        """
        Apply a partial update; None leaves a field unchanged.

        Every input is validated before any field changes, so a rejected
        update leaves the session as it was.
        """
        new_tier = parse_tier(tier) if tier is not None else None
        new_selection = ProductSelection(product_ids) if product_ids is not None else None
        if per_product_discounts is not None:
            for product_id in per_product_discounts:
                get_product(product_id)

        if new_tier is not None:
            self.tier = new_tier
        if new_selection is not None:
            self.selection = new_selection
        if merchant_name is not None:
            self.merchant_name = merchant_name
        if global_discount is not None:
            self.policy.global_input = global_discount
        if use_per_product is not None:
            self.policy.use_per_product = use_per_product
        if per_product_discounts is not None:
            for product_id, value in per_product_discounts.items():
                self.policy.set_override(product_id, value)

    def toggle_product(self, product_id: str) -> bool:
        return self.selection.toggle(product_id)

    # ---------------------------------------------------------------------
    # Display currency
    # ---------------------------------------------------------------------

    @property
    def rates(self) -> RateSnapshot:
        return self.rate_state.snapshot

    @property
    def fetch_state(self) -> FetchState:
        return self.rate_state.snapshot.fetch_state

    async def select_currency(self, code: Optional[str]) -> RateSnapshot:
        """Select a display currency and wait for its rates."""
        return await self.rate_state.select_currency(code)

    def schedule_currency(self, code: Optional[str]) -> Optional[asyncio.Task]:
        """
        Select a display currency, loading its rates in the background.

        The snapshot shows LOADING (or IDLE for a blank code) on return.
        Returns the load task, or None when nothing needs fetching.
        """
        generation, want, previous_table = self.rate_state.begin_selection(code)
        if not want:
            return None
        task = asyncio.create_task(self.rate_state.load_rates(generation, want, previous_table))
        self._rate_tasks.add(task)
        task.add_done_callback(self._rate_tasks.discard)
        return task

    def close(self) -> None:
        """Cancel background rate loads."""
        for task in list(self._rate_tasks):
            task.cancel()
        self._rate_tasks.clear()

    # ---------------------------------------------------------------------
    # Derived output
    # ---------------------------------------------------------------------

    def quote(self) -> QuoteResult:
        return build_quote(
            self.selection.ids,
            self.tier,
            self.policy,
            merchant_name=self.merchant_name,
            rates=self.rates,
        )

    def rows(self) -> List[PricingRow]:
        return self.quote().rows

    def totals(self) -> Totals:
        return self.quote().totals

    def summary(self) -> PricingSummary:
        return self.quote().summary

    def message(self) -> str:
        return self.quote().message


class SessionStore:
    """In-memory registry of quote sessions (oldest evicted past max_count)."""

    def __init__(self, resolver: RateResolver, max_count: Optional[int] = None):
        self._resolver = resolver
        self._max_count = max_count or get_settings().session_max_count
        self._sessions: "OrderedDict[str, QuoteSession]" = OrderedDict()

    def create(self) -> QuoteSession:
        session = QuoteSession(self._resolver)
        self._sessions[session.id] = session
        while len(self._sessions) > self._max_count:
            _, evicted = self._sessions.popitem(last=False)
            evicted.close()
            logger.info(f"Evicted quote session {evicted.id}")
        return session

    def get(self, session_id: str) -> QuoteSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def delete(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundException(session_id)
        session.close()

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
