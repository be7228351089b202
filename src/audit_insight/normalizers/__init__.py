"""Normalizers mapping each producer's native shape to Issues."""

from typing import Any, Callable

from ..models import Category, NormalizedReport, Shape
from .lint import normalize_lint
from .flat import normalize_flat
from .page_speed import normalize_page_speed


Normalizer = Callable[[Category, Any, frozenset], NormalizedReport]

NORMALIZERS: dict[Shape, Normalizer] = {
    Shape.LINT: normalize_lint,
    Shape.FLAT: normalize_flat,
    Shape.PAGE_SPEED: normalize_page_speed,
}


def normalize_artifact(
    category: Category, data: Any, excluded: frozenset[str] = frozenset()
) -> NormalizedReport:
    """Dispatch to the normalizer for the category's artifact shape."""
    if category.shape is None:
        return NormalizedReport(category=category)
    return NORMALIZERS[category.shape](category, data, excluded)


__all__ = [
    "NORMALIZERS",
    "normalize_artifact",
    "normalize_lint",
    "normalize_flat",
    "normalize_page_speed",
]
