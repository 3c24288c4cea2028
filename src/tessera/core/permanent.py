"""Permanent-only deep copies for markup-embedded data.

Everything stuffed into a data attribute ends up in the page. Join results
(`_images`, `_relatedDocs`, ...) can be enormous and may expose documents
the anonymous visitor should never see, so they are always stripped.
"""

from collections.abc import Mapping
from typing import Any

# Identity is the one underscore key browser code needs
_KEPT_PRIVATE_KEYS = frozenset({"_id"})


def is_permanent_key(key: object) -> bool:
    """Whether a mapping key names a permanent (non-derived) property."""
    if not isinstance(key, str):
        return True
    return not key.startswith("_") or key in _KEPT_PRIVATE_KEYS


def clone_permanent(value: Any) -> Any:
    """Deep copy value keeping only permanent properties.

    - Mapping keys starting with `_` are dropped (except `_id`)
    - Callables are dropped from mappings and sequences
    - Objects exposing `to_dict()` (records, areas) are cloned via their
      persisted form, which already excludes derived values

    Args:
        value: Any JSON-like structure, possibly containing records

    Returns:
        A new structure sharing no mutable state with value
    """
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict) and not isinstance(value, type):
        return clone_permanent(to_dict())
    if isinstance(value, Mapping):
        return {
            key: clone_permanent(item)
            for key, item in value.items()
            if is_permanent_key(key) and not callable(item)
        }
    if isinstance(value, (list, tuple)):
        return [clone_permanent(item) for item in value if not callable(item)]
    return value
