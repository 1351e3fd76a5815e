"""Pydantic schemas for file-drive."""

from file_drive.schemas.objects import (
    Durability,
    FileUpload,
    InMemoryObject,
    StoredObject,
)

__all__ = ["Durability", "FileUpload", "InMemoryObject", "StoredObject"]
