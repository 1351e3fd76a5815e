"""Stable identifiers for stored files."""


def fingerprint(name: str, last_modified: int, size: int) -> str:
    """
    Derive the storage key of a file from its metadata.

    The key is the only way a previously stored file is found again, so it
    must not depend on anything but these three values. Two files sharing
    name, modification time and size are treated as the same file.

    Example:
        fingerprint("report.pdf", 1000, 1024) -> "report.pdf-1000-1024"
    """
    return f"{name}-{last_modified}-{size}"
