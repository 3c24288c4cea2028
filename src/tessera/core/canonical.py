"""
Canonical JSON serialization for markup-embedded data.

Two-phase approach:
1. Normalize: Convert dates, sets and tuples to JSON-safe primitives (our code)
2. Serialize: Produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

Deterministic output keeps rendered markup byte-stable between requests,
which matters for HTTP caching of pages.

IMPORTANT: NaN and Infinity are strictly REJECTED, not silently converted.
"""

import math
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

import rfc8785


def _normalize_value(obj: Any) -> Any:
    """Convert a single value to a JSON-safe primitive.

    Raises:
        ValueError: If value contains NaN or Infinity
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(
                f"Cannot canonicalize non-finite float: {obj}. "
                "Use None for missing values, not NaN."
            )
        return obj

    # Primitives pass through unchanged
    if obj is None or isinstance(obj, (str, int, bool)):
        return obj

    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)

    if isinstance(obj, Mapping):
        return {str(key): _normalize_value(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize_value(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(_normalize_value(item) for item in obj)

    raise TypeError(f"Cannot canonicalize value of type {type(obj).__name__}")


def canonical_json(obj: Any) -> str:
    """Serialize obj to canonical (RFC 8785) JSON text.

    Args:
        obj: JSON-like structure

    Returns:
        Compact JSON with sorted keys

    Raises:
        ValueError: On non-finite floats
        TypeError: On values with no JSON representation
    """
    return rfc8785.dumps(_normalize_value(obj)).decode("utf-8")
