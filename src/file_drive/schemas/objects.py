"""Schemas for files moving between the UI, memory and the store."""

import mimetypes
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from file_drive.services.fingerprint import fingerprint

DEFAULT_MIME_TYPE = "application/octet-stream"


class FileUpload(BaseModel):
    """A file handed to the drive by the user, before it has an id."""

    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: str = ""
    size: int = Field(ge=0)
    last_modified: int  # milliseconds since the epoch
    payload: bytes = Field(repr=False)

    @classmethod
    def from_bytes(
        cls, name: str, payload: bytes, last_modified: int, mime_type: str = ""
    ) -> "FileUpload":
        return cls(
            name=name,
            mime_type=mime_type,
            size=len(payload),
            last_modified=last_modified,
            payload=payload,
        )

    @classmethod
    def from_path(cls, path: Path) -> "FileUpload":
        """Read a local file, using its mtime as the modification time."""
        stat = path.stat()
        mime_type, _ = mimetypes.guess_type(path.name)
        payload = path.read_bytes()
        return cls(
            name=path.name,
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            size=len(payload),
            last_modified=int(stat.st_mtime * 1000),
            payload=payload,
        )

    @property
    def key(self) -> str:
        return fingerprint(self.name, self.last_modified, self.size)


class StoredObject(FileUpload):
    """A file as persisted in the object store, keyed by its fingerprint."""

    id: str

    @classmethod
    def from_upload(cls, upload: FileUpload) -> "StoredObject":
        # id is always re-derived, never trusted from the input
        return cls(id=upload.key, **upload.model_dump(exclude={"id"}))


class Durability(str, Enum):
    """How far an in-memory file has made it towards the store."""

    PENDING = "pending"
    PERSISTED = "persisted"
    FAILED = "failed"
    EPHEMERAL = "ephemeral"  # store unavailable this session


class InMemoryObject(BaseModel):
    """The UI's copy of a stored file."""

    model_config = ConfigDict(validate_assignment=True)

    obj: StoredObject
    durability: Durability = Durability.PENDING

    @property
    def id(self) -> str:
        return self.obj.id

    @property
    def name(self) -> str:
        return self.obj.name

    @property
    def mime_type(self) -> str:
        return self.obj.mime_type

    @property
    def size(self) -> int:
        return self.obj.size

    @property
    def last_modified(self) -> int:
        return self.obj.last_modified

    @property
    def payload(self) -> bytes:
        return self.obj.payload
