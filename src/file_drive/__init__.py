"""file-drive - a local, persistent file repository."""

__version__ = "0.1.0"
