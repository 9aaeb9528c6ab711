"""Small shared helpers."""

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


def format_size(size: int) -> str:
    """Format a byte count with binary (1024-based) units: B, KB, MB, GB."""
    if size < 0:
        raise ValueError(f"size must not be negative: {size}")
    if size >= _GB:
        return f"{size / _GB:.1f} GB"
    if size >= _MB:
        return f"{size / _MB:.1f} MB"
    if size >= _KB:
        return f"{size / _KB:.1f} KB"
    return f"{size} B"