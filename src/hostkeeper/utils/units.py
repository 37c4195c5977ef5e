"""Human-readable size formatting for probe adapters.

Sizes leave the probe layer as pre-formatted strings. The core never parses
them back.
"""

ZERO_SIZE = "0B"

_DECIMAL_UNITS = ["B", "kB", "MB", "GB", "TB", "PB"]
_BINARY_UNITS = ["B", "K", "M", "G", "T", "P"]


def human_size(num_bytes: int | float) -> str:
    """Format a byte count the way the docker CLI reports reclaimed space.

    Uses decimal units with up to three significant digits, e.g. ``1.23GB``.
    """
    if num_bytes <= 0:
        return ZERO_SIZE
    value = float(num_bytes)
    for unit in _DECIMAL_UNITS:
        if value < 999.5 or unit == _DECIMAL_UNITS[-1]:
            return f"{value:.3g}{unit}"
        value /= 1000
    return ZERO_SIZE


def human_size_binary(num_bytes: int | float) -> str:
    """Format a byte count the way ``df -h`` and ``free -h`` do, e.g. ``39G``."""
    if num_bytes <= 0:
        return "0"
    value = float(num_bytes)
    for unit in _BINARY_UNITS:
        if value < 1024 or unit == _BINARY_UNITS[-1]:
            if unit == "B":
                return f"{int(value)}B"
            return f"{value:.1f}{unit}" if value < 10 else f"{value:.0f}{unit}"
        value /= 1024
    return "0"
