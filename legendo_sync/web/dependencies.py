"""
FastAPI Dependency Injection Module

Provides centralized dependency injection for the LEGENDO SYNC service.
The vault, sync service and payment service are built once per process
from the active WebConfig and handed to routes explicitly.

Usage in routes:
    from legendo_sync.web.dependencies import get_vault

    @router.get("/example")
    async def example(vault: SyncVault = Depends(get_vault)):
        ...

Usage in tests:
    from legendo_sync.web.dependencies import DependencyOverrides

    with DependencyOverrides() as overrides:
        overrides.set_payment_service(mock_service)
        # Run tests with mocked dependencies
"""

import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)


# =============================================================================
# Dependency Container
# =============================================================================


@dataclass
class _DependencyContainer:
    """
    Internal container for managing dependency instances.

    Provides lazy initialization and override capability for testing.
    """

    _instances: Dict[str, Any] = field(default_factory=dict)
    _overrides: Dict[str, Any] = field(default_factory=dict)
    _factories: Dict[str, Callable[[], Any]] = field(default_factory=dict)

    def register(self, name: str, factory: Callable[[], Any]) -> None:
        """Register a factory function for creating a dependency."""
        self._factories[name] = factory

    def get(self, name: str) -> Any:
        """
        Get a dependency instance.

        Order of resolution:
        1. Override (if set for testing)
        2. Cached instance
        3. Create new instance via factory
        """
        if name in self._overrides:
            return self._overrides[name]

        if name in self._instances:
            return self._instances[name]

        if name in self._factories:
            instance = self._factories[name]()
            self._instances[name] = instance
            return instance

        raise KeyError(f"Unknown dependency: {name}")

    def provide(self, name: str, instance: Any) -> None:
        """Cache a pre-built instance."""
        self._instances[name] = instance

    def set_override(self, name: str, instance: Any) -> None:
        """Set an override for testing."""
        self._overrides[name] = instance

    def reset(self, name: Optional[str] = None) -> None:
        """
        Reset cached instances.

        Args:
            name: Specific dependency to reset, or None for all
        """
        if name:
            instance = self._instances.pop(name, None)
            _dispose(instance)
        else:
            for instance in self._instances.values():
                _dispose(instance)
            self._instances.clear()

    def reset_all(self) -> None:
        """Reset all instances and overrides."""
        self.reset()
        self._overrides.clear()


def _dispose(instance: Any) -> None:
    from legendo_sync.vault import SyncVault

    if isinstance(instance, SyncVault):
        instance.shutdown()


# Global container instance
_container = _DependencyContainer()


# =============================================================================
# Dependency Registration
# =============================================================================


def _create_config():
    """Factory for WebConfig."""
    from legendo_sync.web.config import get_config as get_global_config

    return get_global_config()


def _create_vault():
    """Factory for SyncVault."""
    from legendo_sync.vault import SyncVault, VaultConfig, load_key

    config = _container.get("config")
    key = load_key(config.encryption_key) if config.encryption_key else None

    return SyncVault(
        VaultConfig(
            key=key,
            sweep_interval=config.sweep_interval,
            max_age=config.max_age,
        )
    )


def _create_sync_service():
    """Factory for AssetSyncService."""
    from legendo_sync.sync import AssetSyncService

    config = _container.get("config")
    return AssetSyncService(_container.get("vault"), delay=config.sync_delay)


def _create_payment_service():
    """Factory for PayPalService."""
    from legendo_sync.payments import PayPalService

    config = _container.get("config")
    if not config.paypal.client_id or not config.paypal.client_secret:
        logger.warning("PayPal credentials are not configured")
    return PayPalService.from_config(config.paypal)


_container.register("config", _create_config)
_container.register("vault", _create_vault)
_container.register("sync_service", _create_sync_service)
_container.register("payment_service", _create_payment_service)


def configure(config) -> None:
    """Install a config and drop every instance built from the previous one."""
    _container.reset()
    _container.provide("config", config)


# =============================================================================
# FastAPI Dependency Functions
# =============================================================================


def get_config():
    """
    FastAPI dependency for WebConfig.

    Usage:
        @router.get("/")
        async def handler(config: WebConfig = Depends(get_config)):
            ...
    """
    return _container.get("config")


def get_vault():
    """FastAPI dependency for SyncVault."""
    return _container.get("vault")


def get_sync_service():
    """FastAPI dependency for AssetSyncService."""
    return _container.get("sync_service")


def get_payment_service():
    """FastAPI dependency for PayPalService."""
    return _container.get("payment_service")


def validate_request(x_api_key: Optional[str] = Header(None)) -> Optional[str]:
    """
    FastAPI dependency: enforce the API key policy.

    When ``require_api_key`` is set, requests without an X-API-Key header are
    rejected. When an ``api_key`` is configured, the header must match it.
    """
    config = get_config()

    if config.require_api_key and not x_api_key:
        raise HTTPException(
            status_code=401,
            detail={"error": "Unauthorized", "message": "API key required"},
        )

    if config.api_key and x_api_key is not None:
        if not hmac.compare_digest(x_api_key.encode(), config.api_key.encode()):
            logger.warning("Rejected request with invalid API key")
            raise HTTPException(
                status_code=401,
                detail={"error": "Unauthorized", "message": "Invalid API key"},
            )

    return x_api_key


# =============================================================================
# Testing Utilities
# =============================================================================


class DependencyOverrides:
    """
    Context manager for temporarily overriding dependencies in tests.

    Usage:
        def test_example():
            with DependencyOverrides() as overrides:
                overrides.set_vault(vault)
                assert get_vault() is vault
    """

    def __init__(self):
        self._original_overrides: Dict[str, Any] = {}

    def __enter__(self) -> "DependencyOverrides":
        self._original_overrides = dict(_container._overrides)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _container._overrides.clear()
        _container._overrides.update(self._original_overrides)

    def set_config(self, config) -> "DependencyOverrides":
        """Override WebConfig."""
        _container.set_override("config", config)
        return self

    def set_vault(self, vault) -> "DependencyOverrides":
        """Override SyncVault."""
        _container.set_override("vault", vault)
        return self

    def set_sync_service(self, service) -> "DependencyOverrides":
        """Override AssetSyncService."""
        _container.set_override("sync_service", service)
        return self

    def set_payment_service(self, service) -> "DependencyOverrides":
        """Override PayPalService."""
        _container.set_override("payment_service", service)
        return self


def reset_dependencies(name: Optional[str] = None) -> None:
    """
    Reset cached dependency instances.

    Args:
        name: Specific dependency to reset, or None for all
    """
    _container.reset(name)


def reset_all_dependencies() -> None:
    """Reset all dependency instances and overrides."""
    _container.reset_all()
