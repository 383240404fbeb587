"""
LEGENDO SYNC Web Service

Provides the HTTP interface including:
- Asset sync trigger and status endpoints
- PayPal payment creation and execution
- Health and vault status endpoints

Stack: FastAPI + uvicorn
"""

from .app import (
    create_app,
    main,
    run_server,
)
from .config import (
    PayPalConfig,
    WebConfig,
    get_config,
)

__all__ = [
    # Application
    "create_app",
    "run_server",
    "main",
    # Configuration
    "WebConfig",
    "PayPalConfig",
    "get_config",
]
