"""Human-readable formatting of byte counts and item counts."""

_KB = 1024.0
_MB = _KB * 1024.0
_GB = _MB * 1024.0
_TB = _GB * 1024.0


def format_size(num_bytes: int) -> str:
    """Format a byte count with a binary unit labelled B, KB, MB, GB or TB."""
    if num_bytes < 0:
        raise ValueError(f"byte count must be non-negative, got {num_bytes}")
    b = float(num_bytes)
    if b < _KB:
        return f"{num_bytes} B"
    if b < _MB:
        return f"{b / _KB:.1f} KB"
    if b < _GB:
        return f"{b / _MB:.1f} MB"
    if b < _TB:
        return f"{b / _GB:.2f} GB"
    return f"{b / _TB:.2f} TB"


def format_count(count: int) -> str:
    """Format a count with comma thousand separators."""
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    return f"{count:,}"