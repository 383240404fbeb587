"""
LEGENDO SYNC Asset Synchronization
"""

from .assets import AssetSyncService

__all__ = ["AssetSyncService"]
