"""
QuoteDesk - Exchange Rate Providers

Independent USD-base rate sources, each turning its own JSON envelope into
one canonical rate table (uppercase 3-letter code -> units per 1 USD):

- FlatRatesProvider:      { "rates": { "EUR": 0.92, ... } }
- ResultEnvelopeProvider: { "result": "success", "rates": { ... } }
- NestedCurrencyProvider: { "usd": { "eur": 0.92, ... } }   (keys upper-cased)

Plus CurrencySymbolsProvider for the list of selectable codes:
  { "symbols": { "EUR": { ... }, ... } }

Providers raise ProviderResponseError for anything they cannot use; transport
errors propagate as httpx exceptions. Fallback between providers lives in
app.services.fx_service.RateResolver.
"""

import logging
import re
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

import httpx

from app.config.settings import Settings, get_settings
from app.utils.error_handling import ProviderResponseError

logger = logging.getLogger(__name__)

RateTable = Dict[str, Decimal]

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


def is_currency_code(code: Any) -> bool:
    """True for a 3-letter alphabetic code (any case)."""
    return isinstance(code, str) and bool(CURRENCY_CODE_PATTERN.match(code.strip().upper()))


def normalize_rates(raw: Mapping[str, Any]) -> RateTable:
    """
    Canonical rate table from a provider's raw mapping.

    Keys are upper-cased; entries that are not 3-letter codes or whose value
    is not a finite positive number are dropped (e.g. crypto tickers).
    """
    table: RateTable = {}
    for key, value in raw.items():
        if not is_currency_code(key):
            continue
        if value is None or isinstance(value, bool):
            continue
        try:
            rate = Decimal(str(value))
        except (InvalidOperation, ValueError):
            continue
        if not rate.is_finite() or rate <= 0:
            continue
        table[key.strip().upper()] = rate
    return table


# =============================================================================
# ABSTRACT RATE PROVIDER
# =============================================================================

class RateProvider(ABC):
    """Abstract base class for USD-base exchange rate providers."""

    def __init__(self, name: str, url: str):
        self.name = name
        self.url = url

    async def fetch_table(self, client: httpx.AsyncClient) -> RateTable:
        """
        GET the provider URL and return its normalized rate table.

        Raises:
            ProviderResponseError: non-2xx status, unparseable or unrecognized body
            httpx.HTTPError: transport failures
        """
        data = await fetch_json(client, self.name, self.url)
        table = self.parse(data)
        logger.debug(f"{self.name}: {len(table)} rates")
        return table

    @abstractmethod
    def parse(self, data: Any) -> RateTable:
        """Turn a decoded JSON body into a rate table."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


async def fetch_json(client: httpx.AsyncClient, name: str, url: str) -> Any:
    """GET a URL and decode its JSON body, rejecting non-2xx statuses."""
    response = await client.get(url)

    if not 200 <= response.status_code < 300:
        raise ProviderResponseError(name, f"HTTP {response.status_code}")

    try:
        return response.json()
    except ValueError as e:
        raise ProviderResponseError(name, f"invalid JSON body ({e})")


# =============================================================================
# PROVIDER VARIANTS
# =============================================================================

class FlatRatesProvider(RateProvider):
    """Body carries a flat `rates` object (Frankfurter, exchangerate.host)."""

    def parse(self, data: Any) -> RateTable:
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, "body is not an object")
        if data.get("success") is False:
            raise ProviderResponseError(self.name, "provider reported failure")
        rates = data.get("rates")
        if not isinstance(rates, dict) or not rates:
            raise ProviderResponseError(self.name, "missing rates")
        return normalize_rates(rates)


class ResultEnvelopeProvider(RateProvider):
    """Body carries `result: "success"` next to `rates` (open.er-api.com)."""

    def parse(self, data: Any) -> RateTable:
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, "body is not an object")
        if data.get("result") != "success":
            raise ProviderResponseError(self.name, f"result is {data.get('result')!r}")
        rates = data.get("rates")
        if not isinstance(rates, dict) or not rates:
            raise ProviderResponseError(self.name, "missing rates")
        return normalize_rates(rates)


class NestedCurrencyProvider(RateProvider):
    """Rates nested under the lowercase base code (jsDelivr currency-api)."""

    def __init__(self, name: str, url: str, base_currency: str = "USD"):
        super().__init__(name, url)
        self.base_key = base_currency.lower()

    def parse(self, data: Any) -> RateTable:
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, "body is not an object")
        nested = data.get(self.base_key)
        if not isinstance(nested, dict) or not nested:
            raise ProviderResponseError(self.name, f"missing '{self.base_key}' object")
        return normalize_rates(nested)


# =============================================================================
# CURRENCY SYMBOLS
# =============================================================================

class CurrencySymbolsProvider:
    """Lists the currency codes a symbols endpoint supports."""

    def __init__(self, url: str, name: str = "exchangerate.host symbols"):
        self.name = name
        self.url = url

    async def fetch_codes(self, client: httpx.AsyncClient) -> List[str]:
        """Codes in endpoint order; an object without `symbols` yields []."""
        data = await fetch_json(client, self.name, self.url)
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, "body is not an object")
        symbols = data.get("symbols") or {}
        if not isinstance(symbols, dict):
            raise ProviderResponseError(self.name, "symbols is not an object")
        return [code.strip().upper() for code in symbols if is_currency_code(code)]


# =============================================================================
# FACTORIES
# =============================================================================

def build_default_providers(config: Optional[Settings] = None) -> List[RateProvider]:
    """The fixed fallback chain, in priority order."""
    config = config or get_settings()
    frankfurter, exchangerate_host, open_er_api, jsdelivr = config.fx_provider_urls
    return [
        FlatRatesProvider("frankfurter", frankfurter),
        FlatRatesProvider("exchangerate.host", exchangerate_host),
        ResultEnvelopeProvider("open.er-api", open_er_api),
        NestedCurrencyProvider("jsdelivr-currency-api", jsdelivr, base_currency="USD"),
    ]


def build_symbols_provider(config: Optional[Settings] = None) -> CurrencySymbolsProvider:
    config = config or get_settings()
    return CurrencySymbolsProvider(config.fx_symbols_url)
