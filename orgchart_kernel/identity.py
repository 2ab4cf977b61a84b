"""
Org Chart Kernel — Identity Normalizer v1.0

Canonical identity keys for employee ids and manager references.
Every comparison between two identifiers goes through normalize_id();
raw values are never compared directly.
"""

from __future__ import annotations

import math
from typing import Any


def normalize_id(value: Any) -> str:
    """
    Canonicalize a raw identifier into a comparable string key.

    None (and a float NaN, the usual spreadsheet blank) normalizes to "",
    which is the "no manager" sentinel and never a valid id. Integral
    floats drop their fractional part so 7.0 and "7" share a key.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def same_identity(a: Any, b: Any) -> bool:
    """True if both identifiers normalize to the same non-empty key."""
    key = normalize_id(a)
    return key != "" and key == normalize_id(b)
