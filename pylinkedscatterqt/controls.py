"""Headless model of the parameter selection controls.

A ``ValueSelector`` is a discrete slider: an ordered list of values plus the
index of the current one. Qt widgets in ``param_slider`` drive a selector;
controllers only ever read ``current()`` at draw time and subscribe to input.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple

from .grid import GridValues, format_number

InputCallback = Callable[[int], None]


def _clamp_index(index: int, count: int) -> int:
    if count <= 0:
        return 0
    return max(0, min(int(index), count - 1))


class ValueSelector:
    """Discrete value selection with min/max/step over value indices.

    Args:
        values: Ordered selectable values.
        index: Initial index (clamped).
        formatter: Display formatter for the current value.
    """

    def __init__(
        self,
        values: Sequence[Any] = (),
        index: int = 0,
        formatter: Callable[[Any], str] = str,
    ) -> None:
        self._values: Tuple[Any, ...] = tuple(values)
        self._index = _clamp_index(index, len(self._values))
        self._formatter = formatter
        self._subscribers: List[InputCallback] = []
        self._configured: List[Callable[[], None]] = []

    # slider-style bounds
    @property
    def minimum(self) -> int:
        return 0

    @property
    def maximum(self) -> int:
        return max(len(self._values) - 1, 0)

    @property
    def step(self) -> int:
        return 1

    @property
    def values(self) -> Tuple[Any, ...]:
        return self._values

    @property
    def index(self) -> int:
        return self._index

    def configure(self, values: Sequence[Any], index: int = 0) -> None:
        """Replace the selectable values.

        Input subscribers are not notified; configuration listeners are.
        """
        self._values = tuple(values)
        self._index = _clamp_index(index, len(self._values))
        for cb in list(self._configured):
            cb()

    def current(self) -> Optional[Any]:
        if not self._values:
            return None
        return self._values[self._index]

    def current_text(self) -> str:
        value = self.current()
        return "" if value is None else self._formatter(value)

    def select(self, index: int) -> None:
        """Move to ``index`` (clamped) and notify subscribers on change."""
        new_index = _clamp_index(index, len(self._values))
        if new_index == self._index:
            return
        self._index = new_index
        for cb in list(self._subscribers):
            cb(new_index)

    def subscribe(self, callback: InputCallback) -> None:
        self._subscribers.append(callback)

    def on_configured(self, callback: Callable[[], None]) -> None:
        self._configured.append(callback)


def format_min_dist(value: Any) -> str:
    return f"{float(value):.2f}"


class GridSelection:
    """The pair of selectors (``n`` and ``d``) driving a grid plot."""

    def __init__(
        self,
        n_selector: Optional[ValueSelector] = None,
        d_selector: Optional[ValueSelector] = None,
    ) -> None:
        self.n_selector = n_selector or ValueSelector(formatter=format_number)
        self.d_selector = d_selector or ValueSelector(formatter=format_min_dist)

    def configure(self, values: GridValues) -> None:
        """Load the grid's declared values; both selectors start at the smallest."""
        self.n_selector.configure(values.n_values, 0)
        self.d_selector.configure(values.d_values, 0)

    def current(self) -> Tuple[Optional[Any], Optional[Any]]:
        return self.n_selector.current(), self.d_selector.current()

    def subscribe(self, callback: Callable[[], None]) -> None:
        self.n_selector.subscribe(lambda _i: callback())
        self.d_selector.subscribe(lambda _i: callback())

    def labels(self) -> Tuple[str, str]:
        return self.n_selector.current_text(), self.d_selector.current_text()
