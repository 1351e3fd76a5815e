from . import auth, files

__all__ = ["auth", "files"]
