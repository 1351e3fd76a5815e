from typing import Optional


class StoreError(Exception):
    """Base exception for object store operations.

    Attributes:
        message: Human-readable error message.
        key: Object id associated with the operation (if applicable).
    """

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.key = key

    def __str__(self) -> str:
        if self.key:
            return f"{self.message} key={self.key}"
        return self.message


class StoreUnavailable(StoreError):
    """Raised when the backing store cannot be opened or created.

    Covers unwritable locations, exhausted disk space and files that are
    locked or not a database.
    """

    def __init__(self, message: str = "Object store unavailable") -> None:
        super().__init__(message)


class WriteError(StoreError):
    """Raised when a put or delete fails after the store was opened"""

    pass


class ReadError(StoreError):
    """Raised when listing the store fails after it was opened"""

    pass


class AuthenticationError(Exception):
    """Raised when the supplied credentials do not match"""

    pass
