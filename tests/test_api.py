"""
QuoteDesk - API Integration Tests

Integration tests for REST API endpoints.
"""

import asyncio

import pytest
from httpx import AsyncClient


SWATCH = "color_swatch_king_variants"
IMAGES = "sa_variant_image_automator"


class TestHealthEndpoint:
    """Test health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        """Test health check returns 200."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_api_info(self, client: AsyncClient):
        response = await client.get("/api")
        assert response.status_code == 200
        assert response.json()["name"] == "QuoteDesk"


class TestCatalogAPI:
    """Test catalog endpoint."""

    @pytest.mark.asyncio
    async def test_get_catalog(self, client: AsyncClient):
        response = await client.get("/api/v1/catalog")

        assert response.status_code == 200
        data = response.json()
        assert data["base_currency"] == "USD"
        assert data["default_tier"] == "Shopify Basic"
        assert data["tiers"][0] == "Pause and Build"
        assert len(data["products"]) == 4
        swatch = data["products"][0]
        assert swatch["id"] == SWATCH
        assert swatch["prices"]["Shopify Basic"] == "14.90"


class TestQuotePreviewAPI:
    """Test stateless quote preview."""

    @pytest.mark.asyncio
    async def test_preview_usd_only(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/quotes/preview",
            json={
                "merchant_name": "Jane",
                "tier": "Shopify Basic",
                "product_ids": [SWATCH],
                "global_discount": "10",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == "Shopify Basic"
        assert data["rows"][0]["actual"] == "14.90"
        assert data["rows"][0]["discounted"] == "13.41"
        assert data["rows"][0]["actual_converted"] is None
        assert data["totals"] == {"actual": "14.90", "discounted": "13.41", "savings": "1.49"}
        assert data["summary"]["totals"]["label"] == "Totals"
        assert data["rates"]["fetch_state"] == "idle"
        assert data["rates"]["note"] is None
        assert "$13.41" in data["message"]
        assert "$1.49" in data["message"]

    @pytest.mark.asyncio
    async def test_preview_with_currency(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/quotes/preview",
            json={"product_ids": [SWATCH], "global_discount": 10, "currency": "aed"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["rates"]["currency"] == "AED"
        assert data["rates"]["fetch_state"] == "ready"
        assert data["rates"]["rate"] == "3.6725"
        assert data["rows"][0]["actual_converted"] == "AED 54.72"
        assert "$14.90 (AED 54.72)" in data["message"]

    @pytest.mark.asyncio
    async def test_preview_rate_failure_is_not_an_error(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/quotes/preview",
            json={"product_ids": [SWATCH], "global_discount": "10", "currency": "XYZ"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["rates"]["fetch_state"] == "error"
        assert data["rates"]["note"].startswith("Could not fetch exchange rates")
        assert data["rows"][0]["discounted"] == "13.41"
        assert "(" not in data["message"]

    @pytest.mark.asyncio
    async def test_preview_malformed_discounts_fall_back(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/quotes/preview",
            json={
                "product_ids": [SWATCH, IMAGES],
                "global_discount": "abc",
                "use_per_product": True,
                "per_product_discounts": {SWATCH: "150", IMAGES: "  "},
            },
        )

        assert response.status_code == 200
        rows = response.json()["rows"]
        assert rows[0]["discount_pct"] == "100"
        assert rows[0]["discounted"] == "0.00"
        assert rows[1]["discount_pct"] == "0"

    @pytest.mark.asyncio
    async def test_preview_unknown_product(self, client: AsyncClient):
        response = await client.post("/api/v1/quotes/preview", json={"product_ids": ["nope"]})

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "PRODUCT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_preview_unknown_tier(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/quotes/preview",
            json={"tier": "Shopify Gold", "product_ids": [SWATCH]},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_TIER"

    @pytest.mark.asyncio
    async def test_preview_invalid_currency(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/quotes/preview",
            json={"product_ids": [SWATCH], "currency": "DOLLARS"},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_CURRENCY"


class TestFxAPI:
    """Test FX endpoints."""

    @pytest.mark.asyncio
    async def test_list_currencies(self, client: AsyncClient):
        response = await client.get("/api/v1/fx/currencies")

        assert response.status_code == 200
        data = response.json()
        assert data["loaded"] is True
        assert data["currencies"] == ["AED", "EUR", "GBP"]

    @pytest.mark.asyncio
    async def test_get_rates(self, client: AsyncClient):
        response = await client.get("/api/v1/fx/rates/eur")

        assert response.status_code == 200
        data = response.json()
        assert data["base_currency"] == "USD"
        assert data["currency"] == "EUR"
        assert data["rate"] == "0.92"
        assert set(data["rates"]) == {"AED", "EUR", "GBP", "JPY"}

    @pytest.mark.asyncio
    async def test_get_rates_no_provider(self, client: AsyncClient):
        response = await client.get("/api/v1/fx/rates/XYZ")

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["code"] == "NO_RATE_PROVIDER_AVAILABLE"
        assert detail["details"]["currency"] == "XYZ"

    @pytest.mark.asyncio
    async def test_get_rates_invalid_code(self, client: AsyncClient):
        response = await client.get("/api/v1/fx/rates/1AB")
        assert response.status_code == 422


class TestSessionsAPI:
    """Test interactive quote sessions."""

    async def create_session(self, client: AsyncClient) -> str:
        response = await client.post("/api/v1/sessions")
        assert response.status_code == 201
        return response.json()["id"]

    @pytest.mark.asyncio
    async def test_create_session(self, client: AsyncClient):
        response = await client.post("/api/v1/sessions")

        assert response.status_code == 201
        data = response.json()
        assert data["product_ids"] == []
        assert data["quote"]["tier"] == "Shopify Basic"
        assert data["quote"]["totals"]["actual"] == "0.00"

    @pytest.mark.asyncio
    async def test_update_and_get(self, client: AsyncClient):
        session_id = await self.create_session(client)

        response = await client.patch(
            f"/api/v1/sessions/{session_id}",
            json={
                "merchant_name": "Jane",
                "tier": "Shopify Grow",
                "product_ids": [IMAGES, SWATCH],
                "global_discount": "10",
            },
        )
        assert response.status_code == 200

        response = await client.get(f"/api/v1/sessions/{session_id}")
        data = response.json()
        assert data["merchant_name"] == "Jane"
        assert data["product_ids"] == [IMAGES, SWATCH]
        assert data["global_discount"] == "10"
        assert [row["product_id"] for row in data["quote"]["rows"]] == [IMAGES, SWATCH]
        assert data["quote"]["totals"]["actual"] == "54.80"

    @pytest.mark.asyncio
    async def test_rejected_update_leaves_session_unchanged(self, client: AsyncClient):
        session_id = await self.create_session(client)
        await client.patch(f"/api/v1/sessions/{session_id}", json={"product_ids": [IMAGES]})

        response = await client.patch(
            f"/api/v1/sessions/{session_id}",
            json={
                "merchant_name": "Jane",
                "tier": "Shopify Plus",
                "product_ids": [SWATCH],
                "global_discount": "25",
                "per_product_discounts": {SWATCH: "50", "nope": "10"},
            },
        )
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "PRODUCT_NOT_FOUND"

        data = (await client.get(f"/api/v1/sessions/{session_id}")).json()
        assert data["merchant_name"] == ""
        assert data["product_ids"] == [IMAGES]
        assert data["quote"]["tier"] == "Shopify Basic"
        assert data["global_discount"] == "0"

    @pytest.mark.asyncio
    async def test_toggle_product(self, client: AsyncClient):
        session_id = await self.create_session(client)

        response = await client.post(f"/api/v1/sessions/{session_id}/products/{SWATCH}/toggle")
        assert response.json() == {"product_id": SWATCH, "selected": True, "product_ids": [SWATCH]}

        response = await client.post(f"/api/v1/sessions/{session_id}/products/{SWATCH}/toggle")
        assert response.json()["selected"] is False
        assert response.json()["product_ids"] == []

    @pytest.mark.asyncio
    async def test_toggle_unknown_product(self, client: AsyncClient):
        session_id = await self.create_session(client)
        response = await client.post(f"/api/v1/sessions/{session_id}/products/nope/toggle")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_select_currency_and_wait(self, client: AsyncClient):
        session_id = await self.create_session(client)
        await client.patch(
            f"/api/v1/sessions/{session_id}",
            json={"merchant_name": "Jane", "product_ids": [SWATCH], "global_discount": "10"},
        )

        response = await client.put(
            f"/api/v1/sessions/{session_id}/currency",
            json={"currency": "AED", "wait": True},
        )

        assert response.status_code == 200
        rates = response.json()["quote"]["rates"]
        assert rates["currency"] == "AED"
        assert rates["fetch_state"] == "ready"

        response = await client.get(f"/api/v1/sessions/{session_id}/message")
        data = response.json()
        assert data["fetch_state"] == "ready"
        assert "$13.41 (AED 49.25)" in data["message"]

    @pytest.mark.asyncio
    async def test_select_currency_in_background(self, client: AsyncClient, fake_resolver):
        gate = fake_resolver.gate("EUR")
        session_id = await self.create_session(client)

        response = await client.put(f"/api/v1/sessions/{session_id}/currency", json={"currency": "EUR"})

        assert response.status_code == 200
        assert response.json()["quote"]["rates"]["fetch_state"] == "loading"
        assert response.json()["quote"]["rates"]["note"] == "Fetching latest exchange rates…"

        gate.set()
        for _ in range(10):
            await asyncio.sleep(0)
        response = await client.get(f"/api/v1/sessions/{session_id}")
        assert response.json()["quote"]["rates"]["fetch_state"] == "ready"

    @pytest.mark.asyncio
    async def test_delete_session(self, client: AsyncClient):
        session_id = await self.create_session(client)

        response = await client.delete(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 204

        response = await client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "SESSION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invalid_body(self, client: AsyncClient):
        session_id = await self.create_session(client)
        response = await client.patch(f"/api/v1/sessions/{session_id}", json={"product_ids": "not-a-list"})

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"
