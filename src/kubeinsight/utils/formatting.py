"""Resource quantity parsing and human-readable formatting."""

import math
import re
from typing import Optional, Tuple, Union

UNAVAILABLE = "unavailable"

BINARY_SUFFIXES = ["Ki", "Mi", "Gi", "Ti", "Pi", "Ei"]

MEMORY_MULTIPLIERS = {
    "Ki": 1024,
    "Mi": 1024**2,
    "Gi": 1024**3,
    "Ti": 1024**4,
    "Pi": 1024**5,
    "Ei": 1024**6,
    "k": 1000,
    "K": 1000,
    "M": 1000**2,
    "G": 1000**3,
    "T": 1000**4,
    "P": 1000**5,
    "E": 1000**6,
    "m": 0.001,
}

# Fractions of a core, keyed by suffix
CPU_DIVISORS = {
    "m": 1,
    "u": 1000,
    "n": 1_000_000,
}

_QUANTITY_RE = re.compile(r"^([+-]?[0-9.]+(?:[eE][+-]?[0-9]+)?)([A-Za-z]*)$")


def _split_quantity(quantity: str) -> Optional[Tuple[float, str]]:
    match = _QUANTITY_RE.match(quantity.strip())
    if not match:
        return None
    try:
        return float(match.group(1)), match.group(2)
    except ValueError:
        return None


def parse_cpu(quantity: Union[str, int, float, None]) -> Optional[int]:
    """Parse a Kubernetes CPU quantity into milli-cores.

    Returns None for missing or unparseable input. Fractional milli-cores
    round up, as the API server does.
    """
    if quantity is None or quantity == "":
        return None
    if isinstance(quantity, (int, float)):
        return math.ceil(quantity * 1000)

    parts = _split_quantity(str(quantity))
    if parts is None:
        return None
    value, suffix = parts

    if suffix == "":
        return math.ceil(value * 1000)
    if suffix in CPU_DIVISORS:
        return math.ceil(value / CPU_DIVISORS[suffix])
    return None


def parse_memory(quantity: Union[str, int, float, None]) -> Optional[int]:
    """Parse a Kubernetes memory quantity into bytes."""
    if quantity is None or quantity == "":
        return None
    if isinstance(quantity, (int, float)):
        return math.ceil(quantity)

    parts = _split_quantity(str(quantity))
    if parts is None:
        return None
    value, suffix = parts

    if suffix == "":
        return math.ceil(value)
    multiplier = MEMORY_MULTIPLIERS.get(suffix)
    if multiplier is None:
        return None
    return math.ceil(value * multiplier)


def format_cpu(milli_cores: Optional[int]) -> str:
    """Format milli-cores, e.g. 250 -> '250m', 1500 -> '1.50'."""
    if milli_cores is None:
        return UNAVAILABLE
    if milli_cores == 0:
        return "0m"
    if milli_cores < 1000:
        return f"{milli_cores}m"
    return f"{milli_cores / 1000:.2f}"


def format_bytes(num_bytes: Optional[int]) -> str:
    """Format bytes with binary units, e.g. 1073741824 -> '1.0 GiB'."""
    if num_bytes is None:
        return UNAVAILABLE
    if num_bytes == 0:
        return "0B"

    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"

    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit and exp < len(BINARY_SUFFIXES) - 1:
        div *= unit
        exp += 1
        n //= unit

    return f"{num_bytes / div:.1f} {BINARY_SUFFIXES[exp]}B"


def safe_percent(
    numerator: Optional[float], denominator: Optional[float], clamp: bool = True
) -> Optional[float]:
    """Return numerator/denominator as a percentage, or None when undefined."""
    if numerator is None or denominator is None or denominator <= 0:
        return None

    percent = numerator / denominator * 100
    if math.isnan(percent) or math.isinf(percent):
        return None
    if clamp:
        return max(0.0, min(100.0, percent))
    return max(0.0, percent)


def format_percent(value: Optional[float]) -> str:
    """Format a percentage, rendering missing values as 'unavailable'."""
    if value is None:
        return UNAVAILABLE
    return f"{value:.1f}%"


def format_currency(amount: float) -> str:
    """Format a USD amount."""
    return f"${amount:,.2f}"
