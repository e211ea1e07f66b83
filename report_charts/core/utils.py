"""
Utility functions for value formatting, numeric coercion and colour strings.
"""

import math
import re
import logging

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_INTEGER_RE = re.compile(r'^[+-]?\d+$')


def parse_number(text):
    """Return int/float if the whole trimmed text is a number, else None"""
    if text is None:
        return None
    text = str(text).strip()
    if not _NUMBER_RE.match(text):
        return None
    if _INTEGER_RE.match(text):
        return int(text)
    return float(text)


def is_number(value):
    """True for real numbers (bools and NaN excluded)"""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and math.isnan(value))
    return False


def to_number(value, default=0):
    """Coerce a cell to a number, falling back to ``default``"""
    if is_number(value):
        return value
    parsed = parse_number(value)
    return default if parsed is None else parsed


def clamp(value, low, high):
    return max(low, min(value, high))


def format_number(value):
    """Thousands-separated rendering with at most three decimals."""
    if not is_number(value):
        return str(value)
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip('0').rstrip('.')


def format_value(value, value_format=None):
    """Format a value for ticks and tooltips.

    Args:
        value: Number to format
        value_format: 'number', 'percent' or 'currency' (enum member or string)

    Returns:
        Display string, e.g. ``'12%'`` or ``'$1,250'``
    """
    fmt = getattr(value_format, 'value', value_format)
    if fmt == 'percent':
        return f"{format_number(value)}%"
    if fmt == 'currency':
        return f"${format_number(value)}"
    return format_number(value)


def strip_hash(colour):
    """'#3E7274' -> '3E7274'"""
    return colour.lstrip('#') if colour else colour


def with_alpha(colour, alpha_hex):
    """Append a two-digit hex alpha to a '#RRGGBB' colour"""
    return f"{colour}{alpha_hex}"


def rgb_string(rgb):
    r, g, b = rgb
    return f"rgb({r}, {g}, {b})"
