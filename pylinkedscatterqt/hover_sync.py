"""Cross-plot hover synchronization.

This module routes pointer hover/unhover notifications from any registered
plot surface to the highlight/clear callbacks of its link group, so that
hovering row *i* in one plot marks row *i* in every linked plot.

Key Features:
  - Any number of link groups, each spanning two or more surfaces
  - Row index taken from the hovered point's interaction metadata
  - Leading-edge throttling of hover per link (dropped, not queued)
  - Unhover is never throttled so highlights never get stuck
  - Traffic counters for tuning the throttle interval

Example usage:

    registry = HoverSyncRegistry(backend, throttle_ms=250)
    link = PlotLink([ternary_plot, embedding_plot])
    registry.register_pair(link)
    registry.link(link)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .models import HoverSyncStats
from .rendering import HoverEvent, RenderBackend
from .throttle import Clock, RateLimiter

logger = logging.getLogger(__name__)

ROW_INDEX_FIELD = "i"


class Highlightable(Protocol):
    """Callback contract the registry relies on."""

    @property
    def surface_ids(self) -> Sequence[str]: ...

    def highlight(self, index: int) -> None: ...

    def clear(self) -> None: ...


def row_index_of(event: HoverEvent, primary_trace: int = 0) -> Optional[int]:
    """Return the row index of the first hovered point on the primary trace.

    The index comes from ``customdata["i"]`` when present, otherwise from the
    point's position in its trace.
    """
    for point in event.points:
        if point.curve_number != primary_trace:
            continue
        data = point.customdata
        if isinstance(data, Mapping) and ROW_INDEX_FIELD in data:
            try:
                return int(data[ROW_INDEX_FIELD])
            except (TypeError, ValueError):
                pass
        if point.point_index >= 0:
            return point.point_index
    return None


class PlotLink:
    """A link group of highlightable plots.

    ``highlight`` and ``clear`` fan out to every member in order.
    """

    def __init__(self, members: Sequence[Highlightable]) -> None:
        if len(members) < 2:
            raise ValueError("a link needs at least two members")
        self.members: List[Highlightable] = list(members)

    @property
    def surface_ids(self) -> List[str]:
        ids: List[str] = []
        for member in self.members:
            ids.extend(member.surface_ids)
        return ids

    def highlight(self, index: int) -> None:
        for member in self.members:
            member.highlight(index)

    def clear(self) -> None:
        for member in self.members:
            member.clear()


class HoverSyncRegistry:
    """Registry of link groups for one session.

    Links are appended with ``register_pair`` and wired to the backend's hover
    events with ``link``. There is no removal: links live as long as the
    session.

    Args:
        backend: Rendering collaborator delivering hover events.
        throttle_ms: Minimum interval between processed hovers of one link.
        clock: Time source in seconds for the throttle.
        primary_trace: Trace index whose hovers carry row metadata.
    """

    def __init__(
        self,
        backend: RenderBackend,
        throttle_ms: float = 250.0,
        clock: Optional[Clock] = None,
        primary_trace: int = 0,
    ) -> None:
        self._backend = backend
        self._throttle_ms = float(throttle_ms)
        self._clock = clock
        self._primary_trace = primary_trace

        self._pairs: List[Highlightable] = []
        self._limiters: Dict[int, RateLimiter] = {}
        self._linked: List[Highlightable] = []
        self._stats = HoverSyncStats()

    @property
    def pairs(self) -> List[Highlightable]:
        return list(self._pairs)

    @property
    def stats(self) -> HoverSyncStats:
        return self._stats

    @property
    def throttle_ms(self) -> float:
        return self._throttle_ms

    def register_pair(self, pair: Highlightable) -> None:
        """Append a link group. Duplicates are kept."""
        self._pairs.append(pair)

    def is_linked(self, pair: Highlightable) -> bool:
        return any(p is pair for p in self._linked)

    def link(self, pair: Highlightable) -> None:
        """Attach hover/unhover observers to every surface of ``pair``."""
        limiter = self._limiters.get(id(pair))
        if limiter is None:
            limiter = RateLimiter.from_ms(self._throttle_ms, self._clock)
            self._limiters[id(pair)] = limiter
        self._linked.append(pair)

        def handle_hover(event: HoverEvent) -> None:
            index = row_index_of(event, self._primary_trace)
            if index is None:
                self._stats.ignored += 1
                return
            if not limiter.try_acquire():
                self._stats.record_dropped()
                return
            logger.debug("hover %s row %d", event.surface_id, index)
            self._stats.record_processed(index)
            pair.highlight(index)

        def handle_unhover(event: HoverEvent) -> None:
            self._stats.record_cleared()
            pair.clear()

        for surface_id in pair.surface_ids:
            self._backend.on_hover(surface_id, handle_hover)
            self._backend.on_unhover(surface_id, handle_unhover)

    def register_and_link(self, pair: Any) -> None:
        self.register_pair(pair)
        self.link(pair)
