"""
Web Service Configuration

Configuration settings for the LEGENDO SYNC HTTP service.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from legendo_sync.payments.paypal import DEFAULT_CANCEL_URL, DEFAULT_RETURN_URL
from legendo_sync.vault.sweeper import DEFAULT_MAX_AGE, DEFAULT_SWEEP_INTERVAL


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class PayPalConfig:
    """Configuration for the PayPal REST SDK."""

    mode: str = "sandbox"  # sandbox, live
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    return_url: str = DEFAULT_RETURN_URL
    cancel_url: str = DEFAULT_CANCEL_URL


@dataclass
class WebConfig:
    """Configuration for the web service."""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    # Security
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    api_key: Optional[str] = None
    require_api_key: bool = False

    # Vault
    encryption_key: Optional[str] = None  # base64; ephemeral key if unset
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL  # seconds
    max_age: float = DEFAULT_MAX_AGE  # seconds

    # Asset sync
    sync_delay: float = 1.0  # seconds

    # PayPal settings
    paypal: PayPalConfig = field(default_factory=PayPalConfig)

    @classmethod
    def from_env(cls) -> "WebConfig":
        """Create configuration from environment variables."""
        paypal_config = PayPalConfig(
            mode=os.getenv("PAYPAL_MODE", "sandbox"),
            client_id=os.getenv("PAYPAL_CLIENT_ID"),
            client_secret=os.getenv("PAYPAL_CLIENT_SECRET"),
            return_url=os.getenv("PAYPAL_RETURN_URL", DEFAULT_RETURN_URL),
            cancel_url=os.getenv("PAYPAL_CANCEL_URL", DEFAULT_CANCEL_URL),
        )

        cors = os.getenv("LEGENDO_CORS_ORIGINS")
        cors_origins = (
            [origin.strip() for origin in cors.split(",") if origin.strip()]
            if cors else ["http://localhost:3000"]
        )

        return cls(
            host=os.getenv("LEGENDO_HOST", "127.0.0.1"),
            port=int(os.getenv("PORT") or os.getenv("LEGENDO_PORT", "3000")),
            debug=_env_flag("LEGENDO_DEBUG"),
            log_level=os.getenv("LEGENDO_LOG_LEVEL", "INFO").upper(),
            cors_origins=cors_origins,
            api_key=os.getenv("LEGENDO_API_KEY"),
            require_api_key=_env_flag("REQUIRE_API_KEY"),
            encryption_key=os.getenv("LEGENDO_ENCRYPTION_KEY"),
            sweep_interval=float(os.getenv("LEGENDO_SWEEP_INTERVAL", str(DEFAULT_SWEEP_INTERVAL))),
            max_age=float(os.getenv("LEGENDO_MAX_AGE", str(DEFAULT_MAX_AGE))),
            sync_delay=float(os.getenv("LEGENDO_SYNC_DELAY", "1.0")),
            paypal=paypal_config,
        )


# Global configuration instance
_config: Optional[WebConfig] = None


def get_config() -> WebConfig:
    """Get the global web configuration."""
    global _config
    if _config is None:
        _config = WebConfig.from_env()
    return _config


def set_config(config: WebConfig) -> None:
    """Set the global web configuration."""
    global _config
    _config = config
