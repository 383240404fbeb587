"""
System API Routes

Provides endpoints for service status.
"""

import logging
import platform
import sys
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from legendo_sync import __version__
from legendo_sync.vault import SyncVault

from ..dependencies import get_vault

logger = logging.getLogger(__name__)
router = APIRouter()


class VaultStatus(BaseModel):
    """Vault status snapshot."""

    entry_count: int
    uptime_seconds: float
    started_at: datetime
    sweeping: bool
    sweep_interval: float
    max_age: float
    last_sweep_at: Optional[datetime] = None
    total_swept: int


class SystemStatus(BaseModel):
    """Service status."""

    service: str = "LEGENDO SYNC"
    version: str
    python_version: str
    platform: str
    vault: VaultStatus


@router.get("/status", response_model=SystemStatus)
async def get_system_status(vault: SyncVault = Depends(get_vault)) -> SystemStatus:
    """Get service and vault status."""
    return SystemStatus(
        version=__version__,
        python_version=sys.version.split()[0],
        platform=f"{platform.system()} {platform.release()}",
        vault=VaultStatus(**vault.status()),
    )
