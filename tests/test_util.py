import pytest

from phoenixlaunch.util import format_size


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (1, "1 B"), (500, "500 B"), (1023, "1023 B")],
)
def test_format_size_bytes(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [(1024, "1.0 KB"), (1536, "1.5 KB"), (10240, "10.0 KB")],
)
def test_format_size_kilobytes(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [(1024 * 1024, "1.0 MB"), (150 * 1024 * 1024, "150.0 MB")],
)
def test_format_size_megabytes(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [(1024 * 1024 * 1024, "1.0 GB"), (2 * 1024 * 1024 * 1024, "2.0 GB")],
)
def test_format_size_gigabytes(size, expected):
    assert format_size(size) == expected


def test_format_size_rejects_negative():
    with pytest.raises(ValueError):
        format_size(-1)