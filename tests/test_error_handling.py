"""
QuoteDesk - Error Handling and Settings Tests

Tests for the exception hierarchy, its JSON envelope and configuration.
"""

import json

import pytest

from app.config.settings import Settings
from app.utils.error_handling import (
    AppException,
    ErrorCode,
    InvalidTierException,
    NoProviderAvailableException,
    ProductNotFoundException,
    ProviderResponseError,
    create_error_response,
)


class TestExceptionHierarchy:
    """Tests for application exceptions."""

    def test_product_not_found(self):
        exc = ProductNotFoundException("nope")
        assert exc.status_code == 404
        assert exc.code == ErrorCode.PRODUCT_NOT_FOUND
        assert "nope" in exc.message

    def test_invalid_tier_lists_allowed_tiers(self):
        exc = InvalidTierException("Gold", ["Shopify Basic", "Shopify Plus"])
        data = exc.to_dict()

        assert exc.status_code == 422
        assert data["code"] == "INVALID_TIER"
        assert "Shopify Basic" in json.dumps(data)

    def test_no_provider_available(self):
        exc = NoProviderAvailableException("AED", ["frankfurter", "open.er-api"])

        assert isinstance(exc, AppException)
        assert exc.status_code == 502
        assert exc.to_dict()["details"]["attempted_providers"] == ["frankfurter", "open.er-api"]

    def test_provider_response_error_is_internal(self):
        exc = ProviderResponseError("frankfurter", "HTTP 500")
        assert not isinstance(exc, AppException)
        assert str(exc) == "frankfurter: HTTP 500"

    def test_error_response_envelope(self):
        response = create_error_response(
            code=ErrorCode.SESSION_NOT_FOUND,
            message="Session not found",
            status_code=404,
        )
        body = json.loads(response.body)

        assert response.status_code == 404
        assert body["detail"]["code"] == "SESSION_NOT_FOUND"
        assert body["detail"]["message"] == "Session not found"


class TestSettings:
    """Tests for configuration defaults and parsing."""

    def test_defaults(self):
        config = Settings()
        assert config.default_tier == "Shopify Basic"
        assert config.fallback_greeting == "there"
        assert config.fx_request_timeout_seconds == 10.0
        assert len(config.fx_provider_urls) == 4

    def test_cors_origins_list(self):
        config = Settings(cors_origins="http://a.test, http://b.test")
        assert config.cors_origins_list == ["http://a.test", "http://b.test"]

    @pytest.mark.parametrize("env,production", [("production", True), ("development", False)])
    def test_environment_flags(self, env, production):
        config = Settings(app_env=env)
        assert config.is_production is production
        assert config.is_development is not production
