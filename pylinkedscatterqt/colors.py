"""Category color assignment.

Distinct labels are mapped to palette slots in first-seen order, so the same
label sequence always produces the same colors. Label lists are located by an
ordered list of named strategies; the first one that yields labels wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from .models import FieldKeys
from .normalize import merge_blocks

logger = logging.getLogger(__name__)

PALETTE: Tuple[str, ...] = (
    "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
    "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
    "#aec7e8", "#ffbb78", "#98df8a", "#ff9896", "#c5b0d5",
    "#c49c94", "#f7b6d2",
)

PLACEHOLDER_LABEL = "Unknown"
LEGACY_LABEL_FIELD = "rocktypes"


@dataclass(frozen=True)
class ColorAssignment:
    """Result of ``assign_colors``.

    Attributes:
        labels: Label per point (placeholders substituted if needed).
        colors: Color per point, parallel to ``labels``.
        color_map: Label to color, in first-seen label order.
    """

    labels: Tuple[Hashable, ...]
    colors: Tuple[str, ...]
    color_map: Dict[Hashable, str]

    @property
    def categories(self) -> List[Hashable]:
        return list(self.color_map)


def build_color_map(
    labels: Sequence[Hashable], palette: Sequence[str] = PALETTE
) -> Dict[Hashable, str]:
    """Map each distinct label to ``palette[k % len(palette)]``."""
    color_map: Dict[Hashable, str] = {}
    for label in labels:
        if label not in color_map:
            color_map[label] = palette[len(color_map) % len(palette)]
    return color_map


def assign_colors(
    labels: Sequence[Hashable],
    fallback_count: int = 0,
    palette: Sequence[str] = PALETTE,
) -> ColorAssignment:
    """Assign a palette color to every label.

    Args:
        labels: Category label per point.
        fallback_count: Number of placeholder labels to use when ``labels``
            is empty (normally the point count).
        palette: Ordered colors, reused cyclically.

    Returns:
        ColorAssignment with per-point labels and colors.
    """
    if not palette:
        raise ValueError("palette must not be empty")

    labels = list(labels)
    if not labels:
        logger.warning(
            "No usable category labels; using %r for %d points",
            PLACEHOLDER_LABEL,
            fallback_count,
        )
        labels = [PLACEHOLDER_LABEL] * fallback_count

    color_map = build_color_map(labels, palette)
    return ColorAssignment(
        labels=tuple(labels),
        colors=tuple(color_map[label] for label in labels),
        color_map=color_map,
    )


def merge_labels(source: Any, keys: FieldKeys) -> List[Any]:
    """Concatenate label blocks from ``source`` in key order."""
    return merge_blocks(source, keys)


# (root document, resolved grid slice or None, label keys) -> labels or None
LabelResolver = Callable[[Any, Optional[Any], FieldKeys], Optional[List[Any]]]


@dataclass(frozen=True)
class LabelStrategy:
    """A named way of locating the label list for a plot."""

    name: str
    resolve: LabelResolver


def _from_slice(root: Any, slice_: Optional[Any], keys: FieldKeys) -> Optional[List[Any]]:
    if slice_ is None:
        return None
    return merge_labels(slice_, keys) or None


def _from_root(root: Any, slice_: Optional[Any], keys: FieldKeys) -> Optional[List[Any]]:
    return merge_labels(root, keys) or None


def _from_legacy_field(root: Any, slice_: Optional[Any], keys: FieldKeys) -> Optional[List[Any]]:
    return merge_labels(root, LEGACY_LABEL_FIELD) or None


DEFAULT_LABEL_STRATEGIES: Tuple[LabelStrategy, ...] = (
    LabelStrategy("slice", _from_slice),
    LabelStrategy("root", _from_root),
    LabelStrategy("legacy_rocktypes", _from_legacy_field),
)


def resolve_labels(
    strategies: Sequence[LabelStrategy],
    root: Any,
    slice_: Optional[Any],
    keys: FieldKeys,
) -> Tuple[Optional[str], List[Any]]:
    """Try each strategy in order and return ``(strategy_name, labels)``.

    Returns ``(None, [])`` when no strategy finds labels.
    """
    for strategy in strategies:
        labels = strategy.resolve(root, slice_, keys)
        if labels:
            logger.debug("Labels resolved by %r strategy (%d)", strategy.name, len(labels))
            return strategy.name, list(labels)
    return None, []
