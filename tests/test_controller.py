"""Tests for SinglePlot and PlotPair in controller.py.

Tests the UNINITIALIZED -> READY surface state machine (new_plot then react),
grid slice selection through the parameter controls, overlay highlighting,
label fallbacks, error propagation and hover linking through the context.
"""

import pytest

from pylinkedscatterqt.colors import PALETTE, PLACEHOLDER_LABEL
from pylinkedscatterqt.controller import (
    DatasetShapeError,
    PlotPair,
    PlotState,
    SinglePlot,
)
from pylinkedscatterqt.grid import EmptyGridError, make_key_fn
from pylinkedscatterqt.hover_sync import PlotLink
from pylinkedscatterqt.loader import DataFetchError
from pylinkedscatterqt.models import PlotLayout, PlotSourceConfig


def ternary_config(**kw):
    kw.setdefault("title", "QAP")
    return PlotSourceConfig(
        "qap", "qap.json", coords_key="ternary", color_key="rocktype", kind="ternary", **kw
    )


def grid_config(**kw):
    kw.setdefault("title", "UMAP")
    return PlotSourceConfig(
        "umap",
        "umap.json",
        coords_key="embedding",
        color_key="rocktype",
        grid_field="projections",
        **kw,
    )


class TestSinglePlotStateMachine:
    """Tests for first draw vs. later draws."""

    def test_starts_uninitialized(self, context, backend):
        plot = SinglePlot(ternary_config(), context)
        assert plot.state is PlotState.UNINITIALIZED
        assert backend.calls == []

    def test_first_draw_creates_plot(self, context, backend):
        plot = SinglePlot(ternary_config(), context)
        plot.load()
        assert plot.state is PlotState.READY
        assert backend.ops("qap") == ["new_plot"]
        _, _, traces, layout, config = backend.last("new_plot")
        assert config == {"displayModeBar": False}
        assert layout["height"] == 450

    def test_later_draws_update_in_place(self, context, backend):
        plot = SinglePlot(ternary_config(), context)
        plot.load()
        plot.draw()
        plot.draw()
        assert backend.ops("qap") == ["new_plot", "react", "react"]

    def test_draw_before_load(self, context):
        with pytest.raises(RuntimeError):
            SinglePlot(ternary_config(), context).draw()

    def test_reload_keeps_surface(self, context, backend, fetcher):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        plot.load()
        assert backend.ops("umap") == ["new_plot", "react"]
        assert fetcher.requests == ["umap.json", "umap.json"]


class TestSinglePlotDrawing:
    """Tests for trace and layout content."""

    def test_ternary_traces(self, context, backend):
        SinglePlot(ternary_config(), context).load()
        _, _, traces, layout, _ = backend.last("new_plot")
        primary, overlay = traces
        assert primary["type"] == "scatterternary"
        assert len(primary["a"]) == 4
        assert primary["customdata"][1] == {"i": 1, "r": "tonalite"}
        assert primary["marker"]["color"] == [PALETTE[0], PALETTE[1], PALETTE[0], PALETTE[1]]
        assert overlay["a"] == [] and overlay["hoverinfo"] == "none"
        assert layout["ternary"]["aaxis"]["title"] == "Q"
        assert layout["title"] == "QAP"

    def test_scatter_layout_uses_padded_bounds(self, backend, context):
        cfg = PlotSourceConfig("flat", "flat.json", title="Flat")
        plot = SinglePlot(cfg, context)
        plot.load()
        _, _, traces, layout, _ = backend.last("new_plot")
        assert traces[0]["type"] == "scattergl"
        assert layout["xaxis"]["range"] == pytest.approx([-0.15, 3.15])
        assert layout["yaxis"]["range"] == pytest.approx([-0.45, 9.45])
        assert layout["xaxis"]["fixedrange"] is True
        assert plot.entity.label_source == "root"

    def test_missing_labels_use_placeholder(self, documents, context):
        documents["nolabels.json"] = {"coords": [[i, i] for i in range(10)]}
        plot = SinglePlot(PlotSourceConfig("s", "nolabels.json"), context)
        plot.load()
        assert plot.entity.labels == (PLACEHOLDER_LABEL,) * 10
        assert set(plot.entity.colors) == {PALETTE[0]}

    def test_short_label_list_padded(self, documents, context):
        documents["short.json"] = {"coords": [[0, 0], [1, 1], [2, 2]], "labels": ["a", "b"]}
        plot = SinglePlot(PlotSourceConfig("s", "short.json"), context)
        plot.load()
        assert plot.entity.labels == ("a", "b", PLACEHOLDER_LABEL)

    def test_missing_coordinate_field(self, context, backend):
        plot = SinglePlot(PlotSourceConfig("flat", "flat.json", coords_key="nope"), context)
        with pytest.raises(DatasetShapeError):
            plot.load()
        assert plot.state is PlotState.UNINITIALIZED
        assert backend.calls == []

    def test_custom_layout(self, context, backend):
        cfg = PlotSourceConfig("flat", "flat.json", layout=PlotLayout(height=300, width=500))
        SinglePlot(cfg, context).load()
        layout = backend.last("new_plot")[3]
        assert layout["height"] == 300
        assert layout["width"] == 500
        assert layout["autosize"] is False


class TestGridPlot:
    """Tests for parameter grid plots."""

    def test_initial_slice_is_smallest_values(self, context, backend):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        assert plot.selection.current() == (5, 0.1)
        assert plot.entity.resolution.key == "n=5,d=0.1"
        assert backend.last("new_plot")[3]["title"] == "UMAP — n=5,d=0.1"

    def test_selection_change_redraws(self, context, backend):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        plot.selection.n_selector.select(1)
        assert backend.ops("umap") == ["new_plot", "react"]
        _, _, traces, layout = backend.last("react")
        assert layout["title"] == "UMAP — n=15,d=0.1"
        assert traces[0]["x"][0] == 1.0

    def test_labels_fall_back_to_root(self, context):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        assert plot.entity.label_source == "root"
        assert plot.entity.labels == ("granite", "tonalite", "granite", "tonalite")

    def test_selection_labels(self, context):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        plot.selection.d_selector.select(1)
        assert plot.selection.labels() == ("5", "0.50")

    def test_empty_grid(self, documents, context, backend):
        documents["empty.json"] = {"projections": {}}
        cfg = PlotSourceConfig("e", "empty.json", grid_field="projections")
        plot = SinglePlot(cfg, context)
        with pytest.raises(EmptyGridError):
            plot.load()
        assert plot.state is PlotState.UNINITIALIZED
        assert backend.calls == []

    def test_fetch_error_propagates(self, context):
        plot = SinglePlot(PlotSourceConfig("m", "missing.json"), context)
        with pytest.raises(DataFetchError):
            plot.load()
        assert plot.state is PlotState.UNINITIALIZED


class TestHighlight:
    """Tests for overlay highlighting."""

    def test_highlight_moves_overlay(self, context, backend):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        plot.highlight(2)
        assert backend.last("restyle") == ("restyle", "umap", {"x": [[2.0]], "y": [[4.0]]}, [1])

    def test_highlight_then_clear(self, context, backend):
        plot = SinglePlot(ternary_config(), context)
        plot.load()
        plot.highlight(0)
        update = backend.last("restyle")[2]
        assert update["a"] == [[0.5]]
        plot.clear()
        assert backend.last("restyle")[2] == {"a": [[]], "b": [[]], "c": [[]]}

    def test_out_of_range_empties_overlay(self, context, backend):
        plot = SinglePlot(grid_config(), context)
        plot.load()
        plot.highlight(99)
        assert backend.last("restyle")[2] == {"x": [[]], "y": [[]]}

    def test_highlight_before_load_is_noop(self, context, backend):
        plot = SinglePlot(grid_config(), context)
        plot.highlight(1)
        plot.clear()
        assert backend.calls == []


class TestPlotPair:
    """Tests for paired plots."""

    def make_pair(self, context):
        right = grid_config(param_key_fn=make_key_fn(15, 0.1))
        return PlotPair(ternary_config(), right, context)

    def test_registers_on_construction(self, context):
        pair = self.make_pair(context)
        assert context.hover_sync.pairs == [pair]
        assert not context.hover_sync.is_linked(pair)

    def test_load_draws_both_and_links(self, context, backend):
        pair = self.make_pair(context)
        pair.load()
        assert backend.ops() == ["new_plot", "new_plot"]
        assert context.hover_sync.is_linked(pair)
        assert backend.last("new_plot", "umap")[3]["title"] == "UMAP — n=15,d=0.1"

    def test_hover_highlights_both(self, context, backend):
        pair = self.make_pair(context)
        pair.load()
        backend.hover("umap", 1)
        restyled = [c[1] for c in backend.calls if c[0] == "restyle"]
        assert restyled == ["qap", "umap"]
        backend.unhover("qap")
        assert backend.last("restyle", "qap")[2] == {"a": [[]], "b": [[]], "c": [[]]}
        assert backend.last("restyle", "umap")[2] == {"x": [[]], "y": [[]]}

    def test_second_load_links_once(self, context, backend):
        pair = self.make_pair(context)
        pair.load()
        pair.load()
        assert backend.handler_count("hover", "qap") == 1
        assert backend.ops("qap") == ["new_plot", "react"]

    def test_redraw(self, context, backend):
        pair = self.make_pair(context)
        pair.load()
        pair.redraw()
        assert backend.ops() == ["new_plot", "new_plot", "react", "react"]

    def test_missing_slice(self, context):
        right = grid_config(param_key_fn=lambda doc: "n=99,d=9")
        pair = PlotPair(ternary_config(), right, context)
        with pytest.raises(DatasetShapeError):
            pair.load()


class TestLinkedSinglePlots:
    """Tests for linking independent controllers through the context."""

    def test_hover_on_grid_plot_highlights_ternary(self, context, backend, clock):
        ternary = SinglePlot(ternary_config(), context)
        umap = SinglePlot(grid_config(), context)
        ternary.load()
        umap.load()
        context.hover_sync.register_and_link(PlotLink([ternary, umap]))

        backend.hover("umap", 3)
        assert backend.last("restyle", "qap")[2]["a"] == [[0.2]]
        clock.advance_ms(50)
        backend.hover("umap", 1)
        assert context.hover_sync.stats.dropped == 1
        assert context.hover_sync.stats.last_index == 3
