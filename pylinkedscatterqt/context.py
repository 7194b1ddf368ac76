"""Session context shared by every plot controller.

The context replaces a process-wide hover registry: it is created once per
session (or per test), handed to each controller at construction and owns the
hover registry, the rendering backend and the dataset fetcher.
"""

from __future__ import annotations

from typing import Any, Optional

from .hover_sync import HoverSyncRegistry
from .loader import Fetcher, fetch_json
from .models import HoverSyncOptions
from .rendering import RenderBackend
from .throttle import Clock


class PlotContext:
    """Collaborators and shared state for one session.

    Args:
        backend: Rendering collaborator.
        fetcher: Callable returning the decoded document for a location.
        options: Hover synchronization options.
        clock: Time source for hover throttling (defaults to monotonic time).
    """

    def __init__(
        self,
        backend: RenderBackend,
        fetcher: Fetcher = fetch_json,
        options: Optional[HoverSyncOptions] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.backend = backend
        self.fetcher = fetcher
        self.options = options or HoverSyncOptions()
        self.hover_sync = HoverSyncRegistry(
            backend,
            throttle_ms=self.options.throttle_ms,
            clock=clock,
            primary_trace=self.options.primary_trace,
        )

    def fetch(self, location: str) -> Any:
        return self.fetcher(location)
