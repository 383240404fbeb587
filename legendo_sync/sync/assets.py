"""
Asset Sync Service

Runs asset synchronization jobs and keeps their results in the vault.
The sync id handed back to clients is the vault entry id.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict

from legendo_sync.vault import EntryNotFoundError, SyncVault

logger = logging.getLogger(__name__)

# Tag on vault records written by this service. The vault also holds
# payment records under the same id space.
RECORD_KIND = "sync"


class AssetSyncService:
    """Service for managing asset synchronization."""

    def __init__(self, vault: SyncVault, delay: float = 1.0):
        """
        Args:
            vault: Vault holding sync results
            delay: Simulated sync duration in seconds
        """
        self._vault = vault
        self._delay = delay

    async def init_sync(self, input_data: str) -> Dict[str, Any]:
        """
        Run an asset sync.

        Args:
            input_data: Input data for synchronization

        Returns:
            Sync result including its ``syncId``
        """
        logger.info(f"Initiating asset sync (input length={len(input_data)})")

        if self._delay > 0:
            await asyncio.sleep(self._delay)

        record = {
            "status": "success",
            "message": "Asset sync completed",
            "input": input_data,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
        sync_id = self._vault.store({**record, "kind": RECORD_KIND})

        logger.info(f"Asset sync completed: {sync_id}")
        return {**record, "syncId": sync_id}

    async def get_sync_status(self, sync_id: str) -> Dict[str, Any]:
        """
        Get sync status.

        Raises:
            EntryNotFoundError: If the sync id is unknown, has expired or
                addresses a record that is not a sync result
        """
        logger.info(f"Checking sync status: {sync_id}")
        record = self._vault.retrieve(sync_id)
        if not isinstance(record, dict) or record.get("kind") != RECORD_KIND:
            raise EntryNotFoundError(sync_id)
        return {
            "syncId": sync_id,
            "status": "completed",
            "input": record.get("input"),
            "completedAt": record.get("timestamp"),
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
