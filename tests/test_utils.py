"""Tests for display helpers."""

import pytest

from file_drive.utils import display_mime_type, format_file_size


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 Bytes"),
        (1, "1 Bytes"),
        (1023, "1023 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024, "1 MB"),
        (int(2.25 * 1024**3), "2.25 GB"),
        (1024**5, "1024 TB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_display_mime_type():
    assert display_mime_type("image/png") == "image/png"
    assert display_mime_type("") == "unknown"
    assert display_mime_type(None) == "unknown"
