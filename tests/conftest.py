"""
Pytest Configuration and Shared Fixtures

This module provides centralized fixtures for testing LEGENDO SYNC components.
It integrates with the dependency injection system for clean test isolation.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# Environment Setup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment():
    """Ensure clean environment for each test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_dependencies():
    """Reset all dependency injection state between tests."""
    yield

    from legendo_sync.web.dependencies import reset_all_dependencies

    reset_all_dependencies()


# =============================================================================
# Vault Fixtures
# =============================================================================


@pytest.fixture
def encryption_key() -> bytes:
    """Provide a fixed AES-256 key."""
    return bytes(range(32))


@pytest.fixture
def vault(encryption_key):
    """Provide a vault whose sweeper is not running."""
    from legendo_sync.vault import SyncVault, VaultConfig

    v = SyncVault(VaultConfig(key=encryption_key))
    yield v
    v.shutdown()


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self):
        from datetime import datetime

        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds: float) -> None:
        from datetime import timedelta

        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config():
    """Provide a WebConfig suitable for tests."""
    from legendo_sync.web.config import PayPalConfig, WebConfig

    return WebConfig(
        host="127.0.0.1",
        port=3000,
        debug=True,
        require_api_key=False,
        sync_delay=0,
        paypal=PayPalConfig(
            client_id="test-client",
            client_secret="test-secret",
        ),
    )


@pytest.fixture
def dependency_overrides():
    """Provide a context manager for overriding dependencies in tests."""
    from legendo_sync.web.dependencies import DependencyOverrides

    return DependencyOverrides()


# =============================================================================
# Mock Service Fixtures
# =============================================================================


@pytest.fixture
def mock_payment_service():
    """Provide a mock PayPalService."""
    service = MagicMock()
    service.create_payment = AsyncMock(return_value={
        "id": "PAYID-TEST123",
        "state": "created",
        "links": [
            {"href": "https://api.sandbox.paypal.com/v1/payments/payment/PAYID-TEST123",
             "rel": "self", "method": "GET"},
            {"href": "https://www.sandbox.paypal.com/cgi-bin/webscr?token=EC-1",
             "rel": "approval_url", "method": "REDIRECT"},
        ],
    })
    service.execute_payment = AsyncMock(return_value={
        "id": "PAYID-TEST123",
        "state": "approved",
        "payer": {"payer_info": {"payer_id": "PAYER1"}},
        "transactions": [{"amount": {"total": "10.00", "currency": "USD"}}],
    })
    service.get_payment_details = AsyncMock(return_value={
        "id": "PAYID-TEST123",
        "state": "created",
    })
    return service


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest.fixture
def test_app(test_config, dependency_overrides, mock_payment_service):
    """
    Provide a FastAPI test application with a mocked payment service.

    Usage:
        def test_endpoint(test_app):
            from fastapi.testclient import TestClient
            client = TestClient(test_app)
            response = client.get("/health")
    """
    with dependency_overrides as overrides:
        from legendo_sync.web.app import create_app

        app = create_app(test_config)
        overrides.set_payment_service(mock_payment_service)
        yield app


@pytest.fixture
def client(test_app):
    """Provide a TestClient with the application lifespan running."""
    from fastapi.testclient import TestClient

    with TestClient(test_app) as c:
        yield c
