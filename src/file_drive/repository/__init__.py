from .object_repository import ObjectRepository, StoreHandle

__all__ = ["ObjectRepository", "StoreHandle"]
