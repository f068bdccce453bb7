"""Lenient scalar parsing helpers for untyped GeoJSON attributes.

Remote documents carry coordinates and attributes of whatever type their
producer chose. These helpers turn such values into finite numbers or
return None; they never raise.

Example:
    Parse a coordinate pair and a year:
        >>> from treemap.utils.parsing import finite_pair, parse_int
        >>> finite_pair([-73.6, 45.5, 12.0])
        (-73.6, 45.5)
        >>> finite_pair([float("nan"), 45.5]) is None
        True
        >>> parse_int("1990")
        1990
        >>> parse_int("19x0") is None
        True
"""

from __future__ import annotations

import math
from typing import Any


def finite_float(value: Any) -> float | None:
    """Return value as a finite float if it is a real number.

    Booleans and strings are rejected; NaN and infinities are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def finite_pair(value: Any) -> tuple[float, float] | None:
    """Return the first two entries of a coordinate array as floats.

    Args:
        value: Candidate position, normally ``[lon, lat]`` or
            ``[lon, lat, elevation]``.

    Returns:
        ``(lon, lat)`` when value is a list or tuple whose first two
        entries are finite numbers, otherwise None.
    """
    if not isinstance(value, list | tuple) or len(value) < 2:
        return None
    lon = finite_float(value[0])
    lat = finite_float(value[1])
    if lon is None or lat is None:
        return None
    return lon, lat


def parse_int(value: Any) -> int | None:
    """Parse an integer from a number or a numeric string.

    Integral floats (``1990.0``) are accepted, fractional ones are not.
    ``None``, empty strings and booleans yield None.

    Args:
        value: Raw attribute value.

    Returns:
        The integer, or None when value does not denote a finite integer.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            number = _float_or_none(text)
            if number is None:
                return None
            value = number
    number = finite_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _float_or_none(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None
