"""Service for reconciling the in-memory file list with the object store."""

import asyncio
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union

import logfire
from loguru import logger

from file_drive.repository import ObjectRepository, StoreHandle
from file_drive.schemas import Durability, FileUpload, InMemoryObject, StoredObject
from file_drive.services.exceptions import StoreError, WriteError
from file_drive.sync.status import SyncStatus, SyncStatusTracker
from file_drive.sync.utils import OutcomeStatus, SyncAction, SyncState

FileRef = Union[InMemoryObject, StoredObject, str]


class LoadState(str, Enum):
    LOADING = "loading"
    READY = "ready"


class SyncService:
    """
    Single source of truth for which files exist.

    Mutations are applied to memory immediately and then written to the
    store in the background. Writes for the same id run in the order they
    were issued; writes for different ids are independent. Store failures
    never propagate to the caller: the file list keeps working and the
    failure is logged, recorded in `state` and flagged on the file.
    """

    def __init__(
        self,
        repository: ObjectRepository,
        tracker: Optional[SyncStatusTracker] = None,
    ):
        self.repository = repository
        self.tracker = tracker or SyncStatusTracker()
        self.state = SyncState()
        self.load_state = LoadState.LOADING

        self._files: Dict[str, InMemoryObject] = {}
        self._handle: Optional[StoreHandle] = None
        self._ready = asyncio.Event()
        self._tails: Dict[str, asyncio.Task] = {}
        self._pending: Set[asyncio.Task] = set()
        # ids deleted before the stored list arrived; never loaded back
        self._deleted_while_loading: Set[str] = set()

    async def __aenter__(self) -> "SyncService":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    @property
    def files(self) -> List[InMemoryObject]:
        return list(self._files.values())

    @property
    def status(self) -> SyncStatus:
        return self.tracker.status

    @property
    def is_loading(self) -> bool:
        return self.load_state == LoadState.LOADING

    @property
    def is_persistent(self) -> bool:
        """False when running memory-only because the store could not be loaded."""
        return self._handle is not None or self.is_loading

    def get(self, object_id: str) -> Optional[InMemoryObject]:
        return self._files.get(object_id)

    async def start(self) -> None:
        """
        Load every stored object into memory, then become ready.

        If the store cannot be opened or read, start with an empty list and
        keep working without persistence for the rest of the session.
        """
        with logfire.span("load_store", store=self.repository.store_name):
            try:
                handle = await self.repository.open()
                objects = await self.repository.list_all(handle)
            except StoreError as e:
                logger.warning(f"Object store unavailable, files will not persist: {e}")
                await self.repository.close()
                objects = []
                handle = None

        self._handle = handle
        for obj in objects:
            # files added or deleted while loading win over what was on disk
            if obj.id in self._files or obj.id in self._deleted_while_loading:
                continue
            self._files[obj.id] = InMemoryObject(obj=obj, durability=Durability.PERSISTED)

        self._deleted_while_loading.clear()
        self.load_state = LoadState.READY
        self._ready.set()
        logger.info(f"Loaded {len(objects)} stored files")

    async def close(self) -> None:
        await self.wait_for_pending()
        await self.repository.close()
        self._handle = None

    def add(self, uploads: Iterable[FileUpload]) -> List[InMemoryObject]:
        """
        Add files. They are visible in `files` as soon as this returns.

        A file whose fingerprint is already present replaces the existing
        entry in place.
        """
        added = []
        for upload in uploads:
            obj = StoredObject.from_upload(upload)
            if self.is_persistent:
                entry = InMemoryObject(obj=obj, durability=Durability.PENDING)
            else:
                entry = InMemoryObject(obj=obj, durability=Durability.EPHEMERAL)

            self._files[obj.id] = entry
            self._deleted_while_loading.discard(obj.id)
            added.append(entry)
            logger.debug(f"Added {obj.id}")

            if entry.durability == Durability.PENDING:
                self._schedule(obj.id, partial(self._put, entry))
        return added

    def delete(self, target: FileRef) -> bool:
        """
        Remove a file. It disappears from `files` as soon as this returns.

        Returns:
            True if the file was in the in-memory list
        """
        object_id = target if isinstance(target, str) else target.id
        removed = self._files.pop(object_id, None) is not None
        logger.debug(f"Deleted {object_id} (in memory: {removed})")
        if self.is_loading:
            self._deleted_while_loading.add(object_id)

        # the store may hold the id even if memory does not
        if self.is_persistent:
            self._schedule(object_id, partial(self._delete, object_id))
        return removed

    def export(self, target: FileRef, destination: Path) -> Path:
        """
        Write a file's payload to local disk. Touches no stored state.

        Args:
            target: File, or its id
            destination: Directory to save into, or a full file path

        Returns:
            The path written. Existing files are never overwritten; a
            numbered name is chosen instead.
        """
        object_id = target if isinstance(target, str) else target.id
        entry = self._files.get(object_id)
        if entry is None:
            raise KeyError(object_id)

        path = destination / entry.name if destination.is_dir() else destination
        path = _unique_path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(entry.payload)
        logger.info(f"Exported {object_id} to {path}")
        return path

    async def wait_for_pending(self) -> None:
        """Wait until every issued write has resolved."""
        while self._pending:
            await asyncio.wait(list(self._pending))

    def _schedule(self, key: str, op: Callable[[], Awaitable[None]]) -> None:
        self.tracker.write_started()
        previous = self._tails.get(key)
        task = asyncio.get_running_loop().create_task(self._run_after(previous, op))
        self._tails[key] = task
        self._pending.add(task)
        task.add_done_callback(partial(self._on_done, key))

    async def _run_after(
        self, previous: Optional[asyncio.Task], op: Callable[[], Awaitable[None]]
    ) -> None:
        try:
            if previous is not None:
                await asyncio.wait([previous])
            await op()
        finally:
            self.tracker.write_finished()

    def _on_done(self, key: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if self._tails.get(key) is task:
            del self._tails[key]
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error(f"Unexpected error syncing {key}")

    async def _wait_for_handle(self) -> Optional[StoreHandle]:
        await self._ready.wait()
        return self._handle

    async def _put(self, entry: InMemoryObject) -> None:
        handle = await self._wait_for_handle()
        if handle is None:
            entry.durability = Durability.EPHEMERAL
            self.state.record(entry.id, SyncAction.PUT, OutcomeStatus.SKIPPED)
            return

        try:
            await self.repository.put_object(handle, entry.obj)
        except WriteError as e:
            logger.error(f"Failed to persist {entry.id}, it will be lost on reload: {e}")
            entry.durability = Durability.FAILED
            self.state.record(entry.id, SyncAction.PUT, OutcomeStatus.ERROR, str(e))
            return

        entry.durability = Durability.PERSISTED
        self.state.record(entry.id, SyncAction.PUT, OutcomeStatus.SUCCESS)

    async def _delete(self, object_id: str) -> None:
        handle = await self._wait_for_handle()
        if handle is None:
            self.state.record(object_id, SyncAction.DELETE, OutcomeStatus.SKIPPED)
            return

        try:
            await self.repository.delete_object(handle, object_id)
        except WriteError as e:
            logger.error(f"Failed to delete {object_id}, it may reappear on reload: {e}")
            self.state.record(object_id, SyncAction.DELETE, OutcomeStatus.ERROR, str(e))
            return

        self.state.record(object_id, SyncAction.DELETE, OutcomeStatus.SUCCESS)


def _unique_path(path: Path) -> Path:
    """report.pdf -> report (1).pdf -> report (2).pdf ..."""
    candidate = path
    n = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem} ({n}){path.suffix}")
        n += 1
    return candidate
