"""Identifier generation and laundering for widgets and array items."""

import re
from typing import Any
from uuid import uuid4

_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def generate_id() -> str:
    """Return a fresh unique identifier."""
    return uuid4().hex


def launder_id(value: Any) -> str | None:
    """Return value if it is a well-formed identifier, otherwise None.

    Only strings of letters, digits, `_` and `-` pass. Anything else
    (numbers, objects, strings with punctuation or whitespace) is rejected
    so that client-supplied ids can never smuggle in query syntax.
    """
    if isinstance(value, str) and _ID_PATTERN.fullmatch(value):
        return value
    return None


def launder_ids(values: Any) -> list[str]:
    """Launder a list of ids, dropping bad entries and duplicates in order."""
    if not isinstance(values, (list, tuple)):
        return []
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        laundered = launder_id(value)
        if laundered is not None and laundered not in seen:
            seen.add(laundered)
            result.append(laundered)
    return result
