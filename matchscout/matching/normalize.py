#!/usr/bin/env python3
"""
Normalization helpers shared by the scoring engine and record parsing.

Matching is exact equality on normalized strings, so every comparison in
the engine goes through these functions first.
"""

import math
import numbers
import re
from decimal import Decimal
from typing import Any, Optional, Set

_WHITESPACE_RE = re.compile(r"\s+")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


def normalize_string(value: Any) -> str:
    """Trim, lowercase and collapse internal whitespace. Falsy input gives ''."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value).strip().lower())


def normalize_array_strings(values: Any) -> Set[str]:
    """
    Normalize a list of strings (or one comma-separated string) into a set.

    Empty items are dropped; anything that is not a string or a
    list/tuple/set yields an empty set.
    """
    if not values:
        return set()
    if isinstance(values, str):
        return normalize_array_strings(values.split(","))
    if isinstance(values, (list, tuple, set, frozenset)):
        out: Set[str] = set()
        for item in values:
            normalized = normalize_string(item)
            if normalized:
                out.add(normalized)
        return out
    return set()


def to_numeric(value: Any) -> Optional[float]:
    """
    Parse a number out of a number or a decorated string such as "$120,000".

    Returns None (absent) rather than 0 when nothing usable is found, so
    callers can tell "cannot evaluate" apart from "evaluates to zero".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = _NON_NUMERIC_RE.sub("", value)
    elif not isinstance(value, (numbers.Real, Decimal)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None
