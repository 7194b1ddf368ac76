"""Parameter grid resolution.

Precomputed embeddings are stored in a mapping keyed by text of the form
``n=<int>,d=<real>``. The real component is not serialized with a consistent
precision across precomputation runs, so a requested ``(n, d)`` pair is
resolved through layered fallbacks, first match wins:

  1. ``exact``    - key built with default number formatting
  2. ``fixed``    - ``d`` formatted with 5 down to 0 fixed decimals
  3. ``prefix``   - first key starting with ``n=<n>,d=``
  4. ``fallback`` - first key of the grid

Typical usage:

    grid = ParameterGrid.from_document(doc)
    n, d = grid.values.n_values[0], grid.values.d_values[0]
    res = grid.resolve(n, d)
    points = grid.slice(res.key)["embedding"]
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

GRID_KEY_PATTERN = re.compile(r"n=([0-9]+),d=([0-9.]+)")
DEFAULT_GRID_FIELD = "projections"
MAX_FIXED_DIGITS = 5


class EmptyGridError(ValueError):
    """Raised when a document has no usable parameter grid."""


@dataclass(frozen=True)
class GridResolution:
    """Outcome of ``resolve_key``.

    Attributes:
        key: The matching grid key.
        strategy: Layer that produced the match
            (``exact``, ``fixed``, ``prefix`` or ``fallback``).
        digits: Fixed decimals used when ``strategy == "fixed"``.
    """

    key: str
    strategy: str
    digits: Optional[int] = None

    @property
    def is_approximate(self) -> bool:
        return self.strategy in ("prefix", "fallback")


@dataclass(frozen=True)
class GridValues:
    """Sorted distinct hyperparameter values declared by grid keys."""

    n_values: Tuple[int, ...] = ()
    d_values: Tuple[float, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.n_values or not self.d_values


def format_number(value: float) -> str:
    """Default number-to-text: ``15.0 -> "15"``, ``0.1 -> "0.1"``."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def format_fixed(value: float, digits: int) -> str:
    """Format with ``digits`` fixed decimals, rounding halves away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_grid_key(n: Any, d: Any) -> str:
    return f"n={format_number(n)},d={format_number(d)}"


def parse_grid_key(key: str) -> Optional[Tuple[int, float]]:
    """Parse ``n=<int>,d=<real>``; returns None when the key does not match."""
    m = GRID_KEY_PATTERN.search(key)
    if m is None:
        return None
    try:
        return int(m.group(1)), float(m.group(2))
    except ValueError:
        # e.g. "d=0.1.2"
        return None


def resolve_key(
    keys: Iterable[str],
    n: Any,
    d: Any,
    max_digits: int = MAX_FIXED_DIGITS,
) -> Optional[GridResolution]:
    """Resolve ``(n, d)`` to a grid key.

    Args:
        keys: Grid keys in the grid's iteration order.
        n: Integer hyperparameter.
        d: Real hyperparameter.
        max_digits: Most fixed decimals tried in the ``fixed`` layer.

    Returns:
        GridResolution, or None if ``keys`` is empty. Callers are expected to
        reject empty grids before resolving.
    """
    ordered: List[str] = list(keys)
    if not ordered:
        return None
    key_set = set(ordered)

    exact = format_grid_key(n, d)
    if exact in key_set:
        return GridResolution(exact, "exact")

    n_text = format_number(n)
    for digits in range(max_digits, -1, -1):
        candidate = f"n={n_text},d={format_fixed(d, digits)}"
        if candidate in key_set:
            return GridResolution(candidate, "fixed", digits)

    prefix = f"n={n_text},d="
    for key in ordered:
        if key.startswith(prefix):
            logger.info("No key for d=%s; using %r", format_number(d), key)
            return GridResolution(key, "prefix")

    logger.warning(
        "No grid key for n=%s; falling back to first key %r", n_text, ordered[0]
    )
    return GridResolution(ordered[0], "fallback")


def extract_grid_values(keys: Iterable[str]) -> GridValues:
    """Collect sorted distinct ``n`` and ``d`` values from grid keys."""
    n_set = set()
    d_set = set()
    for key in keys:
        parsed = parse_grid_key(key)
        if parsed is None:
            continue
        n_set.add(parsed[0])
        d_set.add(parsed[1])
    return GridValues(tuple(sorted(n_set)), tuple(sorted(d_set)))


class ParameterGrid:
    """A string-keyed grid of precomputed slices."""

    def __init__(self, slices: Mapping[str, Any]) -> None:
        if not slices:
            raise EmptyGridError("parameter grid has no keys")
        self._slices: Dict[str, Any] = dict(slices)
        self._keys: Tuple[str, ...] = tuple(self._slices)
        self._values = extract_grid_values(self._keys)

    @classmethod
    def from_document(
        cls, document: Any, field: str = DEFAULT_GRID_FIELD
    ) -> ParameterGrid:
        """Build a grid from ``document[field]``.

        Raises:
            EmptyGridError: If the field is missing, not a mapping or empty.
        """
        if not isinstance(document, Mapping):
            raise EmptyGridError("document is not a JSON object")
        slices = document.get(field)
        if not isinstance(slices, Mapping):
            raise EmptyGridError(f"document has no {field!r} mapping")
        if not slices:
            raise EmptyGridError(f"{field!r} mapping is empty")
        return cls(slices)

    @property
    def keys(self) -> Sequence[str]:
        return self._keys

    @property
    def values(self) -> GridValues:
        return self._values

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._slices

    def resolve(self, n: Any, d: Any) -> GridResolution:
        res = resolve_key(self._keys, n, d)
        if res is None:
            raise EmptyGridError("parameter grid has no keys")
        return res

    def slice(self, key: str) -> Any:
        return self._slices[key]


def make_key_fn(n: Any, d: Any, field: str = DEFAULT_GRID_FIELD):
    """Return a ``document -> key`` callable resolving a fixed ``(n, d)``.

    Useful as ``PlotSourceConfig.param_key_fn`` for plots without sliders.
    """

    def key_fn(document: Any) -> str:
        return ParameterGrid.from_document(document, field).resolve(n, d).key

    return key_fn
