"""Common test fixtures."""

import asyncio
from collections import defaultdict
from pathlib import Path
from typing import Callable

import logfire
import pytest
import pytest_asyncio
from loguru import logger

from file_drive.config import DriveConfig, get_config
from file_drive.repository import ObjectRepository, StoreHandle
from file_drive.schemas import FileUpload, StoredObject
from file_drive.services.exceptions import ReadError, StoreUnavailable, WriteError
from file_drive.sync import SyncService

TEST_EMAIL = "tester@example.com"
TEST_PASSWORD = "correct horse"


@pytest.fixture(scope="session", autouse=True)
def configure_logfire():
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests add sinks bound to the runner's streams; drop them afterwards."""
    yield
    logger.remove()


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("FILE_DRIVE_HOME", str(tmp_path / "file-drive"))
    monkeypatch.setenv("FILE_DRIVE_LOGIN_EMAIL", TEST_EMAIL)
    monkeypatch.setenv("FILE_DRIVE_LOGIN_PASSWORD", TEST_PASSWORD)
    get_config.cache_clear()
    yield tmp_path
    get_config.cache_clear()


@pytest.fixture
def test_config(config_home) -> DriveConfig:
    return DriveConfig()


@pytest.fixture
def object_repository(test_config: DriveConfig) -> ObjectRepository:
    return ObjectRepository.from_config(test_config)


@pytest_asyncio.fixture
async def store_handle(object_repository: ObjectRepository):
    handle = await object_repository.open()
    yield handle
    await object_repository.close()


@pytest_asyncio.fixture
async def sync_service(object_repository: ObjectRepository):
    service = SyncService(object_repository)
    await service.start()
    yield service
    await service.close()


@pytest.fixture
def make_upload() -> Callable[..., FileUpload]:
    def _make(
        name: str = "report.pdf",
        payload: bytes = b"x" * 1024,
        last_modified: int = 1000,
        mime_type: str = "application/pdf",
    ) -> FileUpload:
        return FileUpload.from_bytes(name, payload, last_modified, mime_type=mime_type)

    return _make


class GatedRepository(ObjectRepository):
    """Holds puts for selected ids until released, and records call order."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[tuple[str, str]] = []
        self.blocked: set[str] = set()
        self.gates: dict[str, asyncio.Event] = defaultdict(asyncio.Event)

    def block(self, object_id: str) -> None:
        self.blocked.add(object_id)

    def release(self, object_id: str) -> None:
        self.gates[object_id].set()

    async def put_object(self, handle: StoreHandle, obj: StoredObject) -> None:
        self.calls.append(("put", obj.id))
        if obj.id in self.blocked:
            await self.gates[obj.id].wait()
        await super().put_object(handle, obj)

    async def delete_object(self, handle: StoreHandle, object_id: str) -> bool:
        self.calls.append(("delete", object_id))
        return await super().delete_object(handle, object_id)


class FailingRepository(ObjectRepository):
    """Raises the store's own errors for the operations named in fail_on."""

    def __init__(self, *args, fail_on=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_on = set(fail_on)

    async def open(self) -> StoreHandle:
        if "open" in self.fail_on:
            raise StoreUnavailable("storage disabled")
        return await super().open()

    async def list_all(self, handle: StoreHandle) -> list[StoredObject]:
        if "list" in self.fail_on:
            raise ReadError("read failed")
        return await super().list_all(handle)

    async def put_object(self, handle: StoreHandle, obj: StoredObject) -> None:
        if "put" in self.fail_on:
            raise WriteError("quota exceeded", key=obj.id)
        await super().put_object(handle, obj)

    async def delete_object(self, handle: StoreHandle, object_id: str) -> bool:
        if "delete" in self.fail_on:
            raise WriteError("delete failed", key=object_id)
        return await super().delete_object(handle, object_id)


@pytest.fixture
def gated_repository(test_config: DriveConfig) -> GatedRepository:
    return GatedRepository(test_config.database_path, store_name=test_config.store_name)


@pytest.fixture
def failing_repository_factory(test_config: DriveConfig) -> Callable[..., FailingRepository]:
    def _make(*fail_on: str) -> FailingRepository:
        return FailingRepository(
            test_config.database_path, store_name=test_config.store_name, fail_on=fail_on
        )

    return _make
