"""Main CLI entry point for file-drive."""  # pragma: no cover

from file_drive.cli.app import app  # pragma: no cover

# Register commands
from file_drive.cli.commands import auth, files  # pragma: no cover

__all__ = ["app", "auth", "files"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
