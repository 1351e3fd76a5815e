"""Tracks whether durable writes are in flight."""

from enum import Enum
from typing import Callable, List

from loguru import logger


class SyncStatus(str, Enum):
    IDLE = "idle"  # nothing attempted yet this session
    SYNCING = "syncing"
    SYNCED = "synced"


StatusListener = Callable[[SyncStatus], None]


class SyncStatusTracker:
    """
    Reflects liveness of durable writes, not their success.

    The tracker starts IDLE, moves to SYNCING when a write is issued and to
    SYNCED once every issued write has resolved, whether it succeeded or
    failed. It never performs I/O; the sync service reports each write
    through write_started() and write_finished().
    """

    def __init__(self):
        self._status = SyncStatus.IDLE
        self._in_flight = 0
        self._listeners: List[StatusListener] = []

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a listener for status changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def write_started(self) -> None:
        self._in_flight += 1
        self._set(SyncStatus.SYNCING)

    def write_finished(self) -> None:
        if self._in_flight == 0:
            logger.warning("write_finished called with no write in flight")
            return
        self._in_flight -= 1
        if self._in_flight == 0:
            self._set(SyncStatus.SYNCED)

    def _set(self, status: SyncStatus) -> None:
        if status == self._status:
            return
        logger.debug(f"Sync status: {self._status.value} -> {status.value}")
        self._status = status
        for listener in list(self._listeners):
            listener(status)
