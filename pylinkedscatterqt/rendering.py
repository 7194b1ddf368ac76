"""Rendering collaborator interface.

Controllers talk to whatever paints pixels through ``RenderBackend``. The call
shapes follow plotly.js (``newPlot`` / ``react`` / ``restyle`` and
``plotly_hover`` / ``plotly_unhover`` events) so a backend that forwards them
to a browser is trivial; other backends interpret the same descriptors.
"""

from __future__ import annotations

import abc
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

Trace = Dict[str, Any]
Layout = Dict[str, Any]


@dataclass(frozen=True)
class HoverPoint:
    """Interaction metadata of one point under the pointer."""

    curve_number: int
    point_index: int
    customdata: Any = None


@dataclass(frozen=True)
class HoverEvent:
    """A hover (or unhover) notification from a surface."""

    surface_id: str
    points: Tuple[HoverPoint, ...] = field(default_factory=tuple)


HoverCallback = Callable[[HoverEvent], None]


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def hover_event_from_payload(surface_id: str, payload: Any) -> HoverEvent:
    """Build a HoverEvent from a plotly-style event payload.

    ``payload`` may be a JSON string or an already decoded mapping with a
    ``points`` list. Point entries may use ``pointIndex`` or ``pointNumber``.
    """
    if isinstance(payload, str):
        payload = json.loads(payload)
    raw_points = payload.get("points") if isinstance(payload, Mapping) else None

    points: List[HoverPoint] = []
    for raw in raw_points or []:
        if not isinstance(raw, Mapping):
            continue
        index = raw.get("pointIndex", raw.get("pointNumber"))
        if index is None:
            continue
        points.append(
            HoverPoint(
                curve_number=_int_or(raw.get("curveNumber"), 0),
                point_index=_int_or(index, -1),
                customdata=raw.get("customdata"),
            )
        )
    return HoverEvent(surface_id, tuple(points))


class RenderBackend(abc.ABC):
    """Abstract rendering collaborator addressed by surface id."""

    @abc.abstractmethod
    def new_plot(
        self,
        surface_id: str,
        traces: Sequence[Trace],
        layout: Layout,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Create the surface content (first paint)."""

    @abc.abstractmethod
    def react(self, surface_id: str, traces: Sequence[Trace], layout: Layout) -> None:
        """Update the surface in place, keeping interaction state."""

    @abc.abstractmethod
    def restyle(
        self, surface_id: str, update: Mapping[str, Any], trace_indices: Sequence[int]
    ) -> None:
        """Partially update the given traces (plotly ``restyle`` semantics)."""

    @abc.abstractmethod
    def on_hover(self, surface_id: str, callback: HoverCallback) -> None:
        """Subscribe to hover events on a surface."""

    @abc.abstractmethod
    def on_unhover(self, surface_id: str, callback: HoverCallback) -> None:
        """Subscribe to unhover events on a surface."""


class HoverDispatcher:
    """Per-surface hover/unhover callback lists shared by concrete backends."""

    def __init__(self) -> None:
        self._handlers: Dict[Tuple[str, str], List[HoverCallback]] = {}

    def add(self, kind: str, surface_id: str, callback: HoverCallback) -> None:
        self._handlers.setdefault((kind, surface_id), []).append(callback)

    def emit(self, kind: str, event: HoverEvent) -> None:
        for cb in list(self._handlers.get((kind, event.surface_id), [])):
            cb(event)

    def count(self, kind: str, surface_id: str) -> int:
        return len(self._handlers.get((kind, surface_id), []))
