"""Tests for trace and layout descriptors in traces.py."""

import math

from pylinkedscatterqt.models import (
    INVALID_POINT,
    DisplayBounds,
    HighlightStyle,
    MarkerStyle,
    Point,
    PlotLayout,
    TernaryAxes,
    TernaryPoint,
)
from pylinkedscatterqt.traces import (
    OVERLAY_TRACE,
    PRIMARY_TRACE,
    empty_overlay_update,
    overlay_update,
    plot_config,
    point_metadata,
    scatter_layout,
    scatter_traces,
    ternary_layout,
    ternary_traces,
)


class TestTraces:
    """Tests for primary + overlay trace descriptors."""

    def test_trace_order(self):
        assert (PRIMARY_TRACE, OVERLAY_TRACE) == (0, 1)

    def test_point_metadata(self):
        assert point_metadata(["a", "b"]) == [{"i": 0, "r": "a"}, {"i": 1, "r": "b"}]

    def test_scatter_primary(self):
        traces = scatter_traces([Point(1, 2), INVALID_POINT], ["a", "b"], ["#111", "#222"])
        primary = traces[0]
        assert primary["x"] == [1, None]
        assert primary["y"] == [2, None]
        assert primary["marker"] == {"size": 5.0, "color": ["#111", "#222"], "cliponaxis": False}
        assert primary["hovertemplate"] == "%{customdata.r}<extra></extra>"

    def test_overlay_style(self):
        overlay = scatter_traces([], [], [], highlight=HighlightStyle(size=20))[1]
        assert overlay["x"] == [] and overlay["y"] == []
        assert overlay["marker"]["size"] == 20
        assert overlay["marker"]["color"] == "white"
        assert overlay["marker"]["line"] == {"width": 2.0, "color": "black"}

    def test_ternary_traces(self):
        traces = ternary_traces(
            [TernaryPoint(0.2, 0.3, 0.5)], ["g"], ["#333"], MarkerStyle(size=7)
        )
        assert traces[0]["a"] == [0.2]
        assert traces[0]["c"] == [0.5]
        assert traces[0]["marker"]["size"] == 7
        assert traces[1]["type"] == "scatterternary"


class TestLayouts:
    """Tests for layout descriptors."""

    def test_scatter_layout(self):
        layout = scatter_layout("T", DisplayBounds((0, 1), (2, 3)))
        assert layout["title"] == "T"
        assert layout["margin"] == {"l": 10, "r": 10, "t": 40, "b": 10}
        assert layout["xaxis"]["range"] == [0, 1]
        assert layout["yaxis"]["range"] == [2, 3]
        assert layout["xaxis"]["visible"] is False
        assert layout["showlegend"] is False
        assert layout["autosize"] is True

    def test_ternary_layout(self):
        layout = ternary_layout("Q", TernaryAxes(a_title="X", total=100))
        assert layout["margin"] == {"l": 35, "r": 35, "t": 0, "b": 0}
        assert layout["ternary"]["sum"] == 100
        assert layout["ternary"]["aaxis"] == {"title": "X"}
        assert layout["ternary"]["caxis"] == {"title": "P"}

    def test_plot_config(self):
        assert plot_config(PlotLayout(display_mode_bar=True)) == {"displayModeBar": True}


class TestOverlayUpdates:
    """Tests for overlay restyle payloads."""

    def test_cartesian(self):
        assert overlay_update(Point(1.5, 2)) == {"x": [[1.5]], "y": [[2]]}

    def test_ternary(self):
        assert overlay_update(TernaryPoint(0.1, 0.2, 0.7)) == {
            "a": [[0.1]],
            "b": [[0.2]],
            "c": [[0.7]],
        }

    def test_invalid_point_empties(self):
        assert overlay_update(INVALID_POINT) == empty_overlay_update()
        assert overlay_update(None) == {"x": [[]], "y": [[]]}
        bad = TernaryPoint(math.nan, 0, 0)
        assert overlay_update(bad) == empty_overlay_update(ternary=True)
