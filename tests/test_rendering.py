"""Tests for hover payload decoding and HoverDispatcher in rendering.py."""

import json

from pylinkedscatterqt.context import PlotContext
from pylinkedscatterqt.models import HoverSyncOptions
from pylinkedscatterqt.rendering import (
    HoverDispatcher,
    HoverEvent,
    HoverPoint,
    hover_event_from_payload,
)


class TestHoverEventFromPayload:
    """Tests for decoding plotly-style event payloads."""

    def test_mapping_payload(self):
        payload = {"points": [{"curveNumber": 0, "pointIndex": 3, "customdata": {"i": 3}}]}
        event = hover_event_from_payload("s", payload)
        assert event == HoverEvent("s", (HoverPoint(0, 3, {"i": 3}),))

    def test_json_payload_with_point_number(self):
        payload = json.dumps({"type": "hover", "points": [{"curveNumber": 1, "pointNumber": 0}]})
        event = hover_event_from_payload("s", payload)
        assert event.points == (HoverPoint(1, 0, None),)

    def test_entries_without_index_skipped(self):
        event = hover_event_from_payload("s", {"points": [{"curveNumber": 0}, "junk"]})
        assert event.points == ()

    def test_unhover_payload(self):
        assert hover_event_from_payload("s", {"type": "unhover"}).points == ()


class TestHoverDispatcher:
    """Tests for per-surface callback lists."""

    def test_emit_routes_by_kind_and_surface(self):
        dispatcher = HoverDispatcher()
        seen = []
        dispatcher.add("hover", "a", lambda ev: seen.append(("a", ev.surface_id)))
        dispatcher.add("unhover", "a", lambda ev: seen.append(("un", ev.surface_id)))
        dispatcher.emit("hover", HoverEvent("a"))
        dispatcher.emit("hover", HoverEvent("b"))
        dispatcher.emit("unhover", HoverEvent("a"))
        assert seen == [("a", "a"), ("un", "a")]
        assert dispatcher.count("hover", "a") == 1
        assert dispatcher.count("hover", "b") == 0


class TestPlotContext:
    """Tests for the session context."""

    def test_registry_uses_options(self, backend, fetcher):
        context = PlotContext(backend, fetcher, HoverSyncOptions(throttle_ms=80))
        assert context.hover_sync.throttle_ms == 80
        assert context.fetch("flat.json")["labels"] == ["a", "b", "a", "c"]

    def test_contexts_are_independent(self, backend):
        a, b = PlotContext(backend), PlotContext(backend)
        assert a.hover_sync is not b.hover_sync
