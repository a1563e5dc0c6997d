"""
QuoteDesk - Test Configuration

Pytest fixtures and configuration.
"""

from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.services.discount_service import DiscountPolicy
from app.services.fx_service import RateResolver
from app.utils.error_handling import ProviderResponseError
from main import app, init_state
from tests.fixtures.fx_mock import FakeResolver, MockRateServer, StubProvider


# ===========================================
# FIXTURES
# ===========================================

@pytest.fixture
def usd_rates() -> Dict[str, str]:
    """A small USD-base rate table."""
    return {"AED": "3.6725", "EUR": "0.92", "GBP": "0.79", "JPY": "151.2"}


@pytest.fixture
def fake_resolver(usd_rates) -> FakeResolver:
    """Resolver knowing AED, EUR, GBP and JPY; anything else fails."""
    return FakeResolver(tables={code: usd_rates for code in usd_rates})


@pytest.fixture
def failing_provider() -> StubProvider:
    return StubProvider("down", error=ProviderResponseError("down", "HTTP 503"))


@pytest.fixture
def global_ten_policy() -> DiscountPolicy:
    """10% off everything, no overrides."""
    return DiscountPolicy(global_input="10")


@pytest.fixture
def stub_resolver_factory():
    """Build a real RateResolver over stub providers."""
    def factory(*providers: StubProvider) -> RateResolver:
        return RateResolver(providers=list(providers), timeout=1.0)
    return factory


@pytest_asyncio.fixture(scope="function")
async def client(fake_resolver: FakeResolver) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client whose FX lookups go to the fake resolver."""
    init_state(app, fake_resolver)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.session_store.close_all()


@pytest.fixture
def mock_rate_server() -> MockRateServer:
    """respx-backed provider mock; every provider starts out down."""
    return MockRateServer()
