"""Repository for durable, keyed storage of file objects."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import logfire
from loguru import logger
from sqlalchemy import MetaData, Table, delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from file_drive import db
from file_drive.config import STORE_NAME, DriveConfig
from file_drive.db import DatabaseType
from file_drive.models import object_table
from file_drive.schemas import StoredObject
from file_drive.services.exceptions import ReadError, StoreUnavailable, WriteError


@dataclass(frozen=True)
class StoreHandle:
    """Access to an opened store. Holds no open connection."""

    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]
    table: Table


class ObjectRepository:
    """
    Durable storage of StoredObjects in a single table keyed by id.

    Every operation takes its own session and commits before returning, so
    nothing is shared between calls except the engine, and other processes
    may modify the table in between.
    """

    def __init__(
        self,
        db_path: Path,
        store_name: str = STORE_NAME,
        db_type: DatabaseType = DatabaseType.FILESYSTEM,
    ):
        self.db_path = db_path
        self.store_name = store_name
        self.db_type = db_type
        self.metadata = MetaData()
        self.table = object_table(store_name, self.metadata)
        self._engine: Optional[AsyncEngine] = None

    @classmethod
    def from_config(
        cls, config: DriveConfig, db_type: DatabaseType = DatabaseType.FILESYSTEM
    ) -> "ObjectRepository":
        return cls(config.database_path, store_name=config.store_name, db_type=db_type)

    async def open(self) -> StoreHandle:
        """
        Open the store, creating the table if it does not exist.

        Safe to call repeatedly.

        Raises:
            StoreUnavailable: If the database cannot be created or opened
        """
        try:
            if self.db_type == DatabaseType.FILESYSTEM:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            if self._engine is None:
                self._engine = db.create_engine(self.db_path, self.db_type)
            await db.init_db(self._engine, self.metadata)
        except (SQLAlchemyError, OSError) as e:
            logger.debug(f"Failed to open store {self.store_name} at {self.db_path}: {e}")
            await self._dispose()
            raise StoreUnavailable(f"Cannot open store {self.store_name!r}: {e}") from e

        logger.debug(f"Opened store {self.store_name} at {self.db_path}")
        return StoreHandle(
            engine=self._engine,
            session_maker=async_sessionmaker(self._engine, expire_on_commit=False),
            table=self.table,
        )

    async def close(self) -> None:
        await self._dispose()

    async def _dispose(self) -> None:
        if self._engine is not None:
            engine, self._engine = self._engine, None
            await engine.dispose()

    async def put_object(self, handle: StoreHandle, obj: StoredObject) -> None:
        """
        Insert or replace the object stored under obj.id.

        A single upsert statement, so concurrent puts on one id leave exactly
        one row holding whichever value committed last.

        Raises:
            WriteError: If the write could not be committed
        """
        table = handle.table
        values = {column.name: getattr(obj, column.name) for column in table.columns}
        stmt = insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={name: stmt.excluded[name] for name in values if name != "id"},
        )

        with logfire.span("put_object", key=obj.id, size=obj.size):
            try:
                async with db.scoped_session(handle.session_maker) as session:
                    await session.execute(stmt)
            except SQLAlchemyError as e:
                raise WriteError(f"Failed to store object: {e}", key=obj.id) from e

        logger.debug(f"Stored object {obj.id} ({obj.size} bytes)")

    async def delete_object(self, handle: StoreHandle, object_id: str) -> bool:
        """
        Delete the object stored under object_id.

        Deleting an id that is not stored is not an error.

        Returns:
            True if a row was removed

        Raises:
            WriteError: If the delete could not be committed
        """
        table = handle.table
        with logfire.span("delete_object", key=object_id):
            try:
                async with db.scoped_session(handle.session_maker) as session:
                    result = await session.execute(delete(table).where(table.c.id == object_id))
                    deleted = result.rowcount > 0
            except SQLAlchemyError as e:
                raise WriteError(f"Failed to delete object: {e}", key=object_id) from e

        logger.debug(f"Deleted object {object_id}: {'removed' if deleted else 'not present'}")
        return deleted

    async def list_all(self, handle: StoreHandle) -> List[StoredObject]:
        """
        Fetch every committed object. Order is unspecified.

        Raises:
            ReadError: If the table could not be read
        """
        try:
            async with db.scoped_session(handle.session_maker) as session:
                result = await session.execute(select(handle.table))
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise ReadError(f"Failed to list objects: {e}") from e

        return [StoredObject(**dict(row)) for row in rows]

    async def find_by_id(self, handle: StoreHandle, object_id: str) -> Optional[StoredObject]:
        """Fetch a single object, or None if it is not stored."""
        table = handle.table
        try:
            async with db.scoped_session(handle.session_maker) as session:
                result = await session.execute(select(table).where(table.c.id == object_id))
                row = result.mappings().one_or_none()
        except SQLAlchemyError as e:
            raise ReadError(f"Failed to read object: {e}", key=object_id) from e

        return StoredObject(**dict(row)) if row is not None else None
