"""Coordinate normalization and display bounds.

Every point entering the system goes through ``to_canonical_point`` (or
``to_ternary_point``) so the rest of the package only ever sees ``Point`` /
``TernaryPoint`` instances. Unusable shapes become invalid sentinels instead
of being dropped, which keeps row indices aligned across linked plots.
"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Mapping, Sequence, TypeVar

import numpy as np

from .models import (
    INVALID_POINT,
    INVALID_TERNARY,
    DisplayBounds,
    FieldKeys,
    Point,
    TernaryPoint,
)

T = TypeVar("T")

BOUNDS_PADDING = 0.05
DEFAULT_RANGE = (-1.0, 1.0)

_SQRT3_2 = math.sqrt(3.0) / 2.0


def _as_float(value: Any) -> float:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool):
        raise TypeError("boolean is not a coordinate")
    return float(value)


def _components(raw: Any, names: Sequence[str]) -> List[float] | None:
    """Pull ``len(names)`` components from a sequence or a mapping."""
    if isinstance(raw, Mapping):
        if not all(name in raw for name in names):
            return None
        values = [raw[name] for name in names]
    elif isinstance(raw, (list, tuple, np.ndarray)):
        if len(raw) < len(names):
            return None
        values = [raw[i] for i in range(len(names))]
    else:
        return None

    try:
        return [_as_float(v) for v in values]
    except (TypeError, ValueError):
        return None


def to_canonical_point(raw: Any) -> Point:
    """Convert a raw 2D point to ``Point``.

    Accepts an ordered pair (index 0 = x, index 1 = y) or a mapping with
    ``x`` and ``y``. Anything else yields ``INVALID_POINT``.
    """
    comps = _components(raw, ("x", "y"))
    if comps is None:
        return INVALID_POINT
    return Point(comps[0], comps[1])


def to_ternary_point(raw: Any) -> TernaryPoint:
    """Convert a raw composition to ``TernaryPoint`` (triple or ``a/b/c``)."""
    comps = _components(raw, ("a", "b", "c"))
    if comps is None:
        return INVALID_TERNARY
    return TernaryPoint(comps[0], comps[1], comps[2])


def _as_key_list(keys: FieldKeys) -> List[str]:
    if isinstance(keys, str):
        return [keys]
    return list(keys)


def merge_blocks(source: Any, keys: FieldKeys) -> List[Any]:
    """Concatenate the list blocks ``source[key]`` for each key, in key order.

    Missing keys and non-list blocks are skipped.
    """
    merged: List[Any] = []
    if not isinstance(source, Mapping):
        return merged
    for key in _as_key_list(keys):
        block = source.get(key)
        if not isinstance(block, list):
            continue
        merged.extend(block)
    return merged


def merge_sequences(
    source: Any,
    keys: FieldKeys,
    convert: Callable[[Any], T] = to_canonical_point,  # type: ignore[assignment]
) -> List[T]:
    """Merge coordinate blocks from ``source`` and normalize every point."""
    return [convert(p) for p in merge_blocks(source, keys)]


def has_block(source: Any, keys: FieldKeys) -> bool:
    """Return True if at least one of ``keys`` addresses a list in ``source``."""
    if not isinstance(source, Mapping):
        return False
    return any(isinstance(source.get(k), list) for k in _as_key_list(keys))


def valid_points(points: Sequence[T]) -> List[T]:
    return [p for p in points if getattr(p, "is_valid", False)]


def _axis_range(values: np.ndarray) -> tuple[float, float]:
    lo = float(np.min(values))
    hi = float(np.max(values))
    span = (hi - lo) or 1.0
    pad = span * BOUNDS_PADDING
    return (lo - pad, hi + pad)


def compute_display_bounds(points: Sequence[Point]) -> DisplayBounds:
    """Compute padded axis ranges for a point set.

    Invalid points are ignored. An empty set gives ``[-1, 1]`` on both axes;
    a zero-width axis is given a span of 1 before padding.
    """
    usable = valid_points(points)
    if not usable:
        return DisplayBounds(DEFAULT_RANGE, DEFAULT_RANGE)

    xs = np.fromiter((p.x for p in usable), dtype=np.float64, count=len(usable))
    ys = np.fromiter((p.y for p in usable), dtype=np.float64, count=len(usable))
    return DisplayBounds(_axis_range(xs), _axis_range(ys))


def ternary_to_cartesian(point: TernaryPoint) -> Point:
    """Project a composition onto the unit-side triangle.

    ``a`` sits at the top vertex, ``b`` bottom-left, ``c`` bottom-right.
    Compositions are normalized by their total; a zero total is invalid.
    """
    if not point.is_valid:
        return INVALID_POINT
    total = point.a + point.b + point.c
    if total == 0:
        return INVALID_POINT
    a = point.a / total
    c = point.c / total
    return Point(0.5 * a + c, _SQRT3_2 * a)
