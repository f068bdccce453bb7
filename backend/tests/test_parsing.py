"""Unit tests for treemap.utils.parsing scalar helpers."""

from __future__ import annotations

import math

from treemap.utils import parsing


def test_finite_float_accepts_numbers() -> None:
    """Ints and finite floats become floats."""
    assert parsing.finite_float(3) == 3.0
    assert parsing.finite_float(-73.6) == -73.6


def test_finite_float_rejects_non_numbers() -> None:
    """Strings, booleans, None and non-finite values are rejected."""
    for value in ("1.5", True, None, math.nan, math.inf, -math.inf, [1]):
        assert parsing.finite_float(value) is None


def test_finite_pair_keeps_first_two_coordinates() -> None:
    """A 3D position is reduced to longitude and latitude."""
    assert parsing.finite_pair([-73.6, 45.5, 30.0]) == (-73.6, 45.5)
    assert parsing.finite_pair((-73.6, 45.5)) == (-73.6, 45.5)


def test_finite_pair_rejects_bad_positions() -> None:
    """Short, non-array or non-finite positions yield None."""
    assert parsing.finite_pair([-73.6]) is None
    assert parsing.finite_pair("(-73.6, 45.5)") is None
    assert parsing.finite_pair(None) is None
    assert parsing.finite_pair([math.nan, 45.5]) is None
    assert parsing.finite_pair([-73.6, math.inf]) is None
    assert parsing.finite_pair([None, 45.5]) is None


def test_parse_int_variants() -> None:
    """Integers, integral floats and numeric strings are parsed."""
    assert parsing.parse_int(1990) == 1990
    assert parsing.parse_int(1990.0) == 1990
    assert parsing.parse_int("1990") == 1990
    assert parsing.parse_int(" 2001 ") == 2001
    assert parsing.parse_int("2001.0") == 2001


def test_parse_int_rejects_invalid() -> None:
    """Absent, fractional, boolean and garbage values yield None."""
    for value in (None, "", "   ", "19x0", 1990.5, True, math.nan, "nan"):
        assert parsing.parse_int(value) is None
