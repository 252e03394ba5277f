import pytest

from disksleuth.size import format_count, format_size


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, "0 B"), (512, "512 B"), (1023, "1023 B")],
)
def test_format_size_bytes(value, expected):
    assert format_size(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1024, "1.0 KB"), (1536, "1.5 KB")],
)
def test_format_size_kb(value, expected):
    assert format_size(value) == expected


def test_format_size_mb():
    assert format_size(1_048_576) == "1.0 MB"


def test_format_size_gb():
    assert format_size(1_073_741_824) == "1.00 GB"


def test_format_size_tb():
    assert format_size(1_099_511_627_776) == "1.00 TB"


def test_format_size_large_tb_stays_tb():
    assert format_size(1_099_511_627_776 * 2048) == "2048.00 TB"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, "0"), (999, "999"), (1_000, "1,000"), (1_234_567, "1,234,567")],
)
def test_format_count(value, expected):
    assert format_count(value) == expected


def test_negative_values_rejected():
    with pytest.raises(ValueError):
        format_size(-1)
    with pytest.raises(ValueError):
        format_count(-5)