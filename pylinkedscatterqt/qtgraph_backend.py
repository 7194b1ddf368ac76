"""Native rendering backend built on PyQtGraph.

This module interprets the same trace/layout descriptors the web backend sends
to plotly.js and draws them with ``pg.ScatterPlotItem`` so linked plots can run
without QtWebEngine.

Key features:
  - Cartesian traces drawn as-is, ternary traces projected onto a triangle
  - Per-point brushes from the descriptor's marker colors
  - Overlay trace as a separate scatter item, moved by ``restyle``
  - Hover/unhover emitted from ``sigHovered`` with the point's customdata
  - Fixed axis ranges disable mouse pan/zoom

Typical usage:

    backend = PyQtGraphBackend()
    layout.addWidget(backend.add_surface("qap"))
    layout.addWidget(backend.add_surface("umap"))
    context = PlotContext(backend)

Google-style docstrings + PEP8.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pyqtgraph as pg
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QWidget

from .models import TernaryPoint
from .normalize import ternary_to_cartesian
from .rendering import (
    HoverCallback,
    HoverDispatcher,
    HoverEvent,
    HoverPoint,
    Layout,
    RenderBackend,
    Trace,
)

logger = logging.getLogger(__name__)

_SQRT3_2 = math.sqrt(3.0) / 2.0
_TRIANGLE_X = [0.0, 1.0, 0.5, 0.0]
_TRIANGLE_Y = [0.0, 0.0, _SQRT3_2, 0.0]
_TERNARY_PAD = 0.08

_COORD_KEYS = ("x", "y", "a", "b", "c")


def _as_float(value: Any) -> float:
    return math.nan if value is None else float(value)


def _trace_xy(trace: Mapping[str, Any]) -> Tuple[np.ndarray, np.ndarray]:
    """Cartesian coordinates of a trace descriptor (ternary ones projected)."""
    if "a" in trace:
        pts = [
            ternary_to_cartesian(TernaryPoint(_as_float(a), _as_float(b), _as_float(c)))
            for a, b, c in zip(trace.get("a", []), trace.get("b", []), trace.get("c", []))
        ]
        return (
            np.array([p.x for p in pts], dtype=np.float64),
            np.array([p.y for p in pts], dtype=np.float64),
        )
    xs = np.array([_as_float(v) for v in trace.get("x", [])], dtype=np.float64)
    ys = np.array([_as_float(v) for v in trace.get("y", [])], dtype=np.float64)
    return xs, ys


def _brushes(color: Any, count: int) -> Any:
    if isinstance(color, (list, tuple)):
        return [pg.mkBrush(QColor(c)) for c in color[:count]]
    return pg.mkBrush(QColor(color or "#1f77b4"))


@dataclass
class _Surface:
    """Plot widget plus the scatter items standing in for plotly traces."""

    widget: pg.PlotWidget
    items: List[pg.ScatterPlotItem] = field(default_factory=list)
    traces: List[Dict[str, Any]] = field(default_factory=list)
    # plotted position -> row index, per trace
    rows: List[np.ndarray] = field(default_factory=list)
    frame: List[Any] = field(default_factory=list)
    hovered: Optional[int] = None


class PyQtGraphBackend(RenderBackend):
    """Rendering backend drawing each surface in a ``pg.PlotWidget``."""

    def __init__(self) -> None:
        self._surfaces: Dict[str, _Surface] = {}
        self._hover = HoverDispatcher()

    def add_surface(self, surface_id: str, parent: Optional[QWidget] = None) -> pg.PlotWidget:
        """Create the widget for ``surface_id``.

        Raises:
            ValueError: If the surface already exists.
        """
        if surface_id in self._surfaces:
            raise ValueError(f"surface {surface_id!r} already exists")
        widget = pg.PlotWidget(parent)
        widget.setBackground("w")
        self._surfaces[surface_id] = _Surface(widget)
        return widget

    def widget(self, surface_id: str) -> pg.PlotWidget:
        return self._surface(surface_id).widget

    def trace_items(self, surface_id: str) -> List[pg.ScatterPlotItem]:
        return list(self._surface(surface_id).items)

    def _surface(self, surface_id: str) -> _Surface:
        try:
            return self._surfaces[surface_id]
        except KeyError:
            raise KeyError(f"unknown surface {surface_id!r}; call add_surface first") from None

    # ---------- drawing ----------
    def _set_trace(self, surface: _Surface, index: int, trace: Mapping[str, Any]) -> None:
        xs, ys = _trace_xy(trace)
        valid = np.isfinite(xs) & np.isfinite(ys)
        rows = np.nonzero(valid)[0]

        marker = trace.get("marker") or {}
        line = marker.get("line") or {}
        color = marker.get("color")
        brush = _brushes(color, len(xs))
        if isinstance(brush, list):
            brush = [brush[i] for i in rows if i < len(brush)]
        pen = None
        if line:
            pen = pg.mkPen(QColor(line.get("color", "black")), width=line.get("width", 1))

        customdata = trace.get("customdata")
        data = [customdata[i] for i in rows] if customdata else None

        item = surface.items[index]
        kwargs: Dict[str, Any] = {
            "x": xs[valid],
            "y": ys[valid],
            "size": marker.get("size", 5),
            "brush": brush,
            "pen": pen if pen is not None else pg.mkPen(None),
        }
        if data is not None:
            kwargs["data"] = data
        item.setData(**kwargs)

        surface.traces[index] = dict(trace)
        surface.rows[index] = rows

    def _apply_traces(self, surface_id: str, surface: _Surface, traces: Sequence[Trace]) -> None:
        plot_item = surface.widget.getPlotItem()
        while len(surface.items) < len(traces):
            index = len(surface.items)
            item = pg.ScatterPlotItem(symbol="o", hoverable=index == 0)
            if index == 0:
                item.sigHovered.connect(
                    lambda _item, points, _ev, sid=surface_id: self._on_hovered(sid, points)
                )
            plot_item.addItem(item)
            surface.items.append(item)
            surface.traces.append({})
            surface.rows.append(np.zeros(0, dtype=np.int64))
        for index, item in enumerate(surface.items[len(traces):], start=len(traces)):
            item.clear()
            surface.traces[index] = {}
            surface.rows[index] = np.zeros(0, dtype=np.int64)
        for index, trace in enumerate(traces):
            self._set_trace(surface, index, trace)

    def _apply_layout(self, surface: _Surface, layout: Mapping[str, Any]) -> None:
        widget = surface.widget
        plot_item = widget.getPlotItem()
        plot_item.setTitle(layout.get("title") or None)
        if layout.get("height"):
            widget.setMinimumHeight(int(layout["height"]))

        for item in surface.frame:
            plot_item.removeItem(item)
        surface.frame = []

        if "ternary" in layout:
            self._draw_ternary_frame(surface, layout["ternary"])
            plot_item.hideAxis("left")
            plot_item.hideAxis("bottom")
            plot_item.setAspectLocked(True)
            widget.setXRange(-_TERNARY_PAD, 1 + _TERNARY_PAD, padding=0)
            widget.setYRange(-_TERNARY_PAD, _SQRT3_2 + _TERNARY_PAD, padding=0)
            widget.setMouseEnabled(x=False, y=False)
            return

        xaxis = layout.get("xaxis") or {}
        yaxis = layout.get("yaxis") or {}
        for name, axis in (("bottom", xaxis), ("left", yaxis)):
            if axis.get("visible", True):
                plot_item.showAxis(name)
            else:
                plot_item.hideAxis(name)
        if xaxis.get("range"):
            widget.setXRange(*xaxis["range"], padding=0)
        if yaxis.get("range"):
            widget.setYRange(*yaxis["range"], padding=0)
        widget.setMouseEnabled(
            x=not xaxis.get("fixedrange", False), y=not yaxis.get("fixedrange", False)
        )

    def _draw_ternary_frame(self, surface: _Surface, ternary: Mapping[str, Any]) -> None:
        plot_item = surface.widget.getPlotItem()
        outline = pg.PlotDataItem(_TRIANGLE_X, _TRIANGLE_Y, pen=pg.mkPen("#444444", width=1))
        plot_item.addItem(outline)
        surface.frame.append(outline)

        # a at the top vertex, b bottom-left, c bottom-right
        corners = (
            ("aaxis", 0.5, _SQRT3_2, (0.5, 1.0)),
            ("baxis", 0.0, 0.0, (1.0, 0.0)),
            ("caxis", 1.0, 0.0, (0.0, 0.0)),
        )
        for key, x, y, anchor in corners:
            title = (ternary.get(key) or {}).get("title")
            if not title:
                continue
            text = pg.TextItem(str(title), color="#222222", anchor=anchor)
            text.setPos(x, y)
            plot_item.addItem(text)
            surface.frame.append(text)

    # ---------- hover ----------
    def _on_hovered(self, surface_id: str, points: Sequence[Any]) -> None:
        surface = self._surfaces[surface_id]
        if len(points) == 0:
            if surface.hovered is not None:
                surface.hovered = None
                self._hover.emit("unhover", HoverEvent(surface_id))
            return

        spot = points[0]
        position = spot.index()
        rows = surface.rows[0]
        row = int(rows[position]) if 0 <= position < len(rows) else position
        if row == surface.hovered:
            return
        surface.hovered = row
        self._hover.emit(
            "hover",
            HoverEvent(surface_id, (HoverPoint(0, row, spot.data()),)),
        )

    # ---------- RenderBackend ----------
    def new_plot(
        self,
        surface_id: str,
        traces: Sequence[Trace],
        layout: Layout,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        surface = self._surface(surface_id)
        for item in surface.items:
            surface.widget.getPlotItem().removeItem(item)
        surface.items, surface.traces, surface.rows = [], [], []
        surface.hovered = None
        self._apply_traces(surface_id, surface, traces)
        self._apply_layout(surface, layout)

    def react(self, surface_id: str, traces: Sequence[Trace], layout: Layout) -> None:
        surface = self._surface(surface_id)
        self._apply_traces(surface_id, surface, traces)
        self._apply_layout(surface, layout)

    def restyle(
        self, surface_id: str, update: Mapping[str, Any], trace_indices: Sequence[int]
    ) -> None:
        surface = self._surface(surface_id)
        for n, index in enumerate(trace_indices):
            if not 0 <= index < len(surface.items):
                logger.warning("%s: restyle of missing trace %d", surface_id, index)
                continue
            trace = dict(surface.traces[index])
            for key, values in update.items():
                if key not in _COORD_KEYS:
                    logger.debug("%s: restyle key %r not supported", surface_id, key)
                    continue
                # plotly semantics: one array per targeted trace, cycled
                trace[key] = list(values[n % len(values)]) if values else []
            self._set_trace(surface, index, trace)

    def on_hover(self, surface_id: str, callback: HoverCallback) -> None:
        self._hover.add("hover", surface_id, callback)

    def on_unhover(self, surface_id: str, callback: HoverCallback) -> None:
        self._hover.add("unhover", surface_id, callback)
