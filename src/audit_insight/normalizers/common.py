"""Helpers shared by the producer-specific normalizers."""

import math
from typing import Any, Optional

from ..exceptions import MalformedArtifactError


def unwrap_list(data: Any, key: str, artifact: str = "artifact") -> list[Any]:
    """Return the list a producer artifact holds.

    Arrays pass through. A meta/summary wrapper object is unwrapped via
    ``key``; a wrapper without that sub-field yields an empty list.
    Anything else is malformed.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        inner = data.get(key)
        return inner if isinstance(inner, list) else []
    raise MalformedArtifactError(artifact, f"expected an array or object, got {type(data).__name__}")


def as_int(value: Any) -> Optional[int]:
    """Whole number from an int, finite float or digit string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip().isdigit():
        try:
            return int(value.strip())
        except ValueError:
            # over the interpreter's digit limit
            return None
    return None


def as_float(value: Any) -> Optional[float]:
    """Finite float, or None. NaN and infinities are dropped."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value)
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def first_text(data: dict, *keys: str) -> Optional[str]:
    """First non-blank string value among ``keys``."""
    for key in keys:
        text = as_text(data.get(key))
        if text:
            return text
    return None
