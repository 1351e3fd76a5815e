from file_drive.services.exceptions import (
    ReadError,
    StoreError,
    StoreUnavailable,
    WriteError,
)
from file_drive.services.fingerprint import fingerprint

__all__ = ["fingerprint", "ReadError", "StoreError", "StoreUnavailable", "WriteError"]
