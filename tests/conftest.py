"""Shared fixtures for the headless test suite.

Provides a recording rendering backend, a manual clock for hover throttling,
in-memory dataset documents and a ``PlotContext`` wired to all three.
"""

import pytest

from pylinkedscatterqt.context import PlotContext
from pylinkedscatterqt.loader import DataFetchError
from pylinkedscatterqt.rendering import HoverDispatcher, HoverEvent, HoverPoint, RenderBackend


class RecordingBackend(RenderBackend):
    """Backend that records every call and lets tests fire hover events."""

    def __init__(self):
        self.calls = []
        self._hover = HoverDispatcher()

    def new_plot(self, surface_id, traces, layout, config=None):
        self.calls.append(("new_plot", surface_id, list(traces), layout, config))

    def react(self, surface_id, traces, layout):
        self.calls.append(("react", surface_id, list(traces), layout))

    def restyle(self, surface_id, update, trace_indices):
        self.calls.append(("restyle", surface_id, dict(update), list(trace_indices)))

    def on_hover(self, surface_id, callback):
        self._hover.add("hover", surface_id, callback)

    def on_unhover(self, surface_id, callback):
        self._hover.add("unhover", surface_id, callback)

    # ---- test helpers ----
    def ops(self, surface_id=None):
        return [c[0] for c in self.calls if surface_id is None or c[1] == surface_id]

    def last(self, op, surface_id=None):
        for call in reversed(self.calls):
            if call[0] == op and (surface_id is None or call[1] == surface_id):
                return call
        return None

    def handler_count(self, kind, surface_id):
        return self._hover.count(kind, surface_id)

    def hover(self, surface_id, index, curve=0):
        point = HoverPoint(curve, index, {"i": index, "r": "x"})
        self._hover.emit("hover", HoverEvent(surface_id, (point,)))

    def unhover(self, surface_id):
        self._hover.emit("unhover", HoverEvent(surface_id))


class ManualClock:
    """Monotonic clock advanced explicitly by tests (seconds)."""

    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance_ms(self, ms):
        self.now += ms / 1000.0


class DictFetcher:
    """Fetcher serving documents from a dict and counting requests."""

    def __init__(self, documents):
        self.documents = documents
        self.requests = []

    def __call__(self, location):
        self.requests.append(location)
        if location not in self.documents:
            raise DataFetchError(f"Failed to fetch {location}: 404")
        return self.documents[location]


def make_ternary_doc(count=4):
    coords = [[1.0 / (i + 2), 0.5 - 1.0 / (2 * (i + 2)), 0.5 - 1.0 / (2 * (i + 2))] for i in range(count)]
    return {
        "ternary": coords,
        "rocktype": ["granite" if i % 2 == 0 else "tonalite" for i in range(count)],
    }


def make_grid_doc(count=4):
    def embedding(shift):
        return [[float(i) + shift, float(i) * 2 - shift] for i in range(count)]

    return {
        "rocktype": ["granite" if i % 2 == 0 else "tonalite" for i in range(count)],
        "projections": {
            "n=5,d=0.1": {"embedding": embedding(0.0)},
            "n=5,d=0.5": {"embedding": embedding(0.5)},
            "n=15,d=0.1": {"embedding": embedding(1.0)},
            "n=15,d=0.5": {"embedding": embedding(1.5)},
        },
    }


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def documents():
    return {
        "qap.json": make_ternary_doc(),
        "umap.json": make_grid_doc(),
        "flat.json": {
            "coords": [[0, 0], [1, 1], [2, 4], [3, 9]],
            "labels": ["a", "b", "a", "c"],
        },
    }


@pytest.fixture
def fetcher(documents):
    return DictFetcher(documents)


@pytest.fixture
def context(backend, fetcher, clock):
    return PlotContext(backend, fetcher=fetcher, clock=clock)
