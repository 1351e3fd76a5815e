from .status import SyncStatus, SyncStatusTracker
from .sync_service import LoadState, SyncService

__all__ = ["LoadState", "SyncService", "SyncStatus", "SyncStatusTracker"]
