"""
Asset Sync API Routes

Provides endpoints for triggering asset syncs and checking their status.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from legendo_sync.sync import AssetSyncService
from legendo_sync.vault import EntryNotFoundError

from ..dependencies import get_sync_service, validate_request
from ..models import (
    BAD_REQUEST_RESPONSE,
    NOT_FOUND_RESPONSE,
    UNAUTHORIZED_RESPONSE,
    TriggerRequest,
    bad_request,
    not_found,
)

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(validate_request)])


@router.post("/trigger", responses={**BAD_REQUEST_RESPONSE, **UNAUTHORIZED_RESPONSE})
async def trigger_sync(
    body: TriggerRequest,
    service: AssetSyncService = Depends(get_sync_service),
) -> Dict[str, Any]:
    """
    Trigger asset synchronization.

    Example:
        POST /trigger {"input": "HALO BA LEGENDO"}
    """
    if not body.input:
        raise HTTPException(status_code=400, detail=bad_request("Input parameter is required"))

    return await service.init_sync(body.input)


@router.get("/sync/{sync_id}", responses={**NOT_FOUND_RESPONSE, **UNAUTHORIZED_RESPONSE})
async def get_sync_status(
    sync_id: str,
    service: AssetSyncService = Depends(get_sync_service),
) -> Dict[str, Any]:
    """Get synchronization status."""
    try:
        return await service.get_sync_status(sync_id)
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail=not_found(f"Sync not found: {sync_id}"))
