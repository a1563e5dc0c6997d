"""
QuoteDesk - Foreign Exchange (FX) Service

Optional second display currency for quotes (billing always stays in USD):
- Rate resolution across an ordered chain of independent providers
  (first acceptable table wins, never merged)
- Supported currency code list with a built-in fallback
- Null-safe conversion of USD amounts
- Fetch state and stale-response protection for interactive sessions

USD-denominated figures never depend on anything in this module.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import httpx

from app.config.settings import Settings, get_settings
from app.services.fx_providers import (
    CurrencySymbolsProvider,
    RateProvider,
    RateTable,
    build_default_providers,
    build_symbols_provider,
    is_currency_code,
)
from app.utils.error_handling import (
    InvalidCurrencyException,
    NoProviderAvailableException,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)

# Shown first in selection lists, ahead of the provider's own ordering
COMMON_CURRENCIES = ["AED", "EUR", "GBP", "INR", "AUD", "CAD", "JPY", "ZAR"]

# Used when the symbols endpoint cannot be reached
FALLBACK_CURRENCIES = ["AED", "EUR", "GBP", "INR", "AUD", "CAD", "JPY"]


class FetchState(str, Enum):
    """Freshness of the rate table for the selected currency."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def normalize_currency_code(code: Optional[str]) -> str:
    """Upper-cased, trimmed code; blank means 'USD only'."""
    return (code or "").strip().upper()


# =============================================================================
# RATE RESOLVER
# =============================================================================

class RateResolver:
    """
    Resolves a USD-base rate table containing a requested currency.

    Providers are tried one at a time, in order. The first one whose response
    succeeds, parses, and contains the requested code is used exclusively.
    Any provider failure is logged and skipped; there are no retries.
    """

    def __init__(
        self,
        providers: Optional[Sequence[RateProvider]] = None,
        symbols_provider: Optional[CurrencySymbolsProvider] = None,
        timeout: Optional[float] = None,
        config: Optional[Settings] = None,
    ):
        config = config or get_settings()
        self.providers = list(providers) if providers is not None else build_default_providers(config)
        self.symbols_provider = symbols_provider or build_symbols_provider(config)
        self.timeout = timeout if timeout is not None else config.fx_request_timeout_seconds

    async def resolve_rates(self, target_code: Optional[str]) -> RateTable:
        """
        Get the first acceptable rate table containing `target_code`.

        A blank code accepts the first well-formed table.

        Raises:
            NoProviderAvailableException: every provider failed or lacked the code
        """
        want = normalize_currency_code(target_code)
        attempted: List[str] = []

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for provider in self.providers:
                attempted.append(provider.name)
                try:
                    table = await provider.fetch_table(client)
                except ProviderResponseError as e:
                    logger.warning(f"FX provider {provider.name} unusable: {e.reason}")
                    continue
                except httpx.TimeoutException:
                    logger.warning(f"FX provider {provider.name} timed out")
                    continue
                except httpx.HTTPError as e:
                    logger.warning(f"FX provider {provider.name} request error: {e}")
                    continue
                except Exception as e:
                    logger.warning(f"FX provider {provider.name} failed: {e}")
                    continue

                if want and want not in table:
                    logger.info(f"FX provider {provider.name} has no rate for {want}")
                    continue

                logger.info(f"Resolved USD rates for {want or 'any currency'} via {provider.name}")
                return table

        logger.error(f"No FX provider returned {want or 'a rate table'} (tried: {', '.join(attempted)})")
        raise NoProviderAvailableException(want, attempted)

    async def available_currency_codes(self) -> List[str]:
        """
        Selectable currency codes: common codes first, then the rest.

        Degrades to FALLBACK_CURRENCIES when the symbols endpoint fails.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                listed = await self.symbols_provider.fetch_codes(client)
        except Exception as e:
            logger.warning(f"Currency symbols unavailable, using fallback list: {e}")
            return list(FALLBACK_CURRENCIES)

        ordered: List[str] = []
        for code in COMMON_CURRENCIES + listed:
            if code not in ordered:
                ordered.append(code)
        return ordered


# =============================================================================
# CURRENCY CONVERTER
# =============================================================================

def convert(
    amount_base: Decimal,
    target_code: Optional[str],
    table: Optional[RateTable],
) -> Optional[Decimal]:
    """
    Convert a USD amount with a resolved rate table.

    Returns None (never 0, never raises) when no currency is selected, no
    table is loaded, or the table has no usable rate for the code.
    """
    code = normalize_currency_code(target_code)
    if not code or not table:
        return None
    rate = table.get(code)
    if not rate:
        return None
    return Decimal(amount_base) * rate


# =============================================================================
# SESSION RATE STATE
# =============================================================================

@dataclass(frozen=True)
class RateSnapshot:
    """Rate table + fetch state for the selected currency, replaced wholesale."""
    currency: str = ""
    table: Optional[RateTable] = None
    fetch_state: FetchState = FetchState.IDLE

    def convert(self, amount_base: Decimal) -> Optional[Decimal]:
        return convert(amount_base, self.currency, self.table)


def advisory_note(snapshot: RateSnapshot) -> Optional[str]:
    """User-facing note about converted amounts; None when USD only."""
    if not snapshot.currency:
        return None
    if snapshot.fetch_state == FetchState.LOADING:
        return "Fetching latest exchange rates…"
    if snapshot.fetch_state == FetchState.ERROR:
        return "Could not fetch exchange rates. USD values shown; converted amounts may be missing."
    if snapshot.fetch_state == FetchState.READY:
        return "Converted amounts are indicative based on current rates; billing remains in USD."
    return None


class RateState:
    """
    Rate table and fetch state for one interactive session.

    Every currency selection bumps a generation counter. A resolution only
    publishes its result if its generation is still current when it completes,
    so a late answer for a superseded selection is dropped.
    """

    def __init__(self, resolver: RateResolver):
        self._resolver = resolver
        self._generation = 0
        self._snapshot = RateSnapshot()

    @property
    def snapshot(self) -> RateSnapshot:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def begin_selection(self, code: Optional[str]) -> Tuple[int, str, Optional[RateTable]]:
        """
        Start a currency selection without waiting for rates.

        Bumps the generation and publishes IDLE (blank code) or LOADING.
        The previous table stays visible while loading.

        Returns:
            (generation, normalized code, previous table)
        """
        want = normalize_currency_code(code)
        if want and not is_currency_code(want):
            raise InvalidCurrencyException(code or "")

        self._generation += 1
        previous_table = self._snapshot.table

        if not want:
            self._snapshot = RateSnapshot(currency="", table=previous_table, fetch_state=FetchState.IDLE)
        else:
            self._snapshot = RateSnapshot(currency=want, table=previous_table, fetch_state=FetchState.LOADING)
        return self._generation, want, previous_table

    async def load_rates(
        self,
        generation: int,
        want: str,
        previous_table: Optional[RateTable] = None,
    ) -> RateSnapshot:
        """Resolve rates for a started selection; publish only if still current."""
        try:
            table = await self._resolver.resolve_rates(want)
        except Exception as e:
            if not isinstance(e, NoProviderAvailableException):
                logger.error(f"Unexpected FX failure for {want}: {e}")
            if not self._is_current(generation):
                logger.debug(f"Discarding stale FX failure for {want} (generation {generation})")
                return self._snapshot
            self._snapshot = RateSnapshot(currency=want, table=previous_table, fetch_state=FetchState.ERROR)
            return self._snapshot

        if not self._is_current(generation):
            logger.debug(f"Discarding stale FX rates for {want} (generation {generation})")
            return self._snapshot

        self._snapshot = RateSnapshot(currency=want, table=table, fetch_state=FetchState.READY)
        return self._snapshot

    async def select_currency(self, code: Optional[str]) -> RateSnapshot:
        """
        Select a display currency and load its rate table.

        Blank selects USD only and does not fetch. After a failed load the
        previous table stays visible with fetch_state ERROR.
        """
        generation, want, previous_table = self.begin_selection(code)
        if not want:
            return self._snapshot
        return await self.load_rates(generation, want, previous_table)


# =============================================================================
# CURRENCY DIRECTORY
# =============================================================================

class CurrencyDirectory:
    """Supported currency codes, loaded once at startup."""

    def __init__(self, resolver: RateResolver):
        self._resolver = resolver
        self._generation = 0
        self._codes: List[str] = []
        self.loaded = False

    @property
    def codes(self) -> List[str]:
        return list(self._codes)

    async def load(self) -> List[str]:
        """Load the code list; a result arriving after invalidate() is dropped."""
        self._generation += 1
        generation = self._generation
        codes = await self._resolver.available_currency_codes()
        if generation != self._generation:
            logger.debug("Discarding stale currency code list")
            return self.codes
        self._codes = codes
        self.loaded = True
        logger.info(f"Loaded {len(codes)} selectable currencies")
        return self.codes

    def invalidate(self) -> None:
        """Cancel any in-flight load."""
        self._generation += 1
