from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from plotly.offline import get_plotlyjs
from PySide6.QtCore import QObject, QUrl, Signal, Slot
from PySide6.QtWebChannel import QWebChannel
from PySide6.QtWebEngineCore import QWebEnginePage
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QVBoxLayout, QWidget

from .rendering import (
    HoverCallback,
    HoverDispatcher,
    Layout,
    RenderBackend,
    Trace,
    hover_event_from_payload,
)

logger = logging.getLogger(__name__)

# WSL2/QWebEngine stability knobs (safe to set if not already set)
os.environ.setdefault("QTWEBENGINE_DISABLE_SANDBOX", "1")
os.environ.setdefault(
    "QTWEBENGINE_CHROMIUM_FLAGS", "--no-sandbox --disable-gpu --disable-gpu-compositing"
)

PAGE_NAME = "plot.html"
_RESOURCES = Path(__file__).resolve().parent / "resources"


class _DebugPage(QWebEnginePage):
    def javaScriptConsoleMessage(self, level, message, lineNumber, sourceID):
        logger.debug("[JS] %s:%s %s", sourceID, lineNumber, message)


class _Bridge(QObject):
    eventReceived = Signal(str)  # JSON

    @Slot(str)
    def log(self, msg: str):
        logger.debug("JS: %s", msg)

    @Slot(str)
    def emitEvent(self, payload_json: str):
        self.eventReceived.emit(payload_json)


class _StaticServer:
    """Serves the plot page and plotly.js from a local directory."""

    def __init__(self, root_dir: Path, host: str = "127.0.0.1", port: int = 0):
        self.root_dir = root_dir
        self.host = host
        self.port = port
        self._httpd: Optional[ThreadingHTTPServer] = None

    def start(self) -> None:
        root_dir = self.root_dir

        class Handler(SimpleHTTPRequestHandler):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, directory=str(root_dir), **kwargs)

            def log_message(self, format, *args):
                logger.debug("http: " + format, *args)

        self._httpd = ThreadingHTTPServer((self.host, self.port), Handler)
        # port 0 binds an ephemeral port
        self.port = self._httpd.server_address[1]
        t = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        t.start()

    def shutdown(self) -> None:
        if self._httpd:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def _prepare_static_root(root: Path) -> None:
    """Write the page template and the bundled plotly.js into ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(_RESOURCES / PAGE_NAME, root / PAGE_NAME)
    js_path = root / "plotly.min.js"
    if not js_path.exists():
        js_path.write_text(get_plotlyjs(), encoding="utf-8")


class PlotlyWebView(QWidget):
    """
    QWebEngine page hosting one plotly.js surface, driven by a command bus.
    """

    def __init__(
        self,
        surface_id: str,
        page_url: str,
        on_event: Callable[[str, Dict[str, Any]], None],
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.surface_id = surface_id
        self._on_event_cb = on_event

        self._view = QWebEngineView(self)
        self._page = _DebugPage(self._view)
        self._view.setPage(self._page)

        self._bridge = _Bridge()
        self._bridge.eventReceived.connect(self._on_event)

        # IMPORTANT: keep channel reference
        self._channel = QWebChannel()
        self._channel.registerObject("bridge", self._bridge)
        self._page.setWebChannel(self._channel)

        self._ready = False
        self._cmd_queue: list[dict[str, Any]] = []

        self._page.loadFinished.connect(self._on_load_finished)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._view)

        self._view.load(QUrl(page_url))

    @property
    def ready(self) -> bool:
        return self._ready

    # ---------- event handling ----------
    def _on_event(self, payload_json: str) -> None:
        try:
            ev = json.loads(payload_json)
        except json.JSONDecodeError:
            logger.warning("%s: undecodable page event %r", self.surface_id, payload_json)
            return
        t = ev.get("type")
        if t == "error":
            logger.error("%s: plot page error: %s", self.surface_id, ev.get("message"))
            return
        self._on_event_cb(t, ev)

    # ---------- command bus ----------
    def send(self, cmd: dict[str, Any]) -> None:
        if not self._ready:
            self._cmd_queue.append(cmd)
            return
        js = f"window.__plot_bridge.apply({json.dumps(cmd)});"
        self._page.runJavaScript(js)

    def _on_load_finished(self, ok: bool) -> None:
        self._ready = bool(ok)
        if not self._ready:
            logger.error("%s: plot page failed to load", self.surface_id)
            return
        # flush queued commands
        for cmd in self._cmd_queue:
            self.send(cmd)
        self._cmd_queue.clear()


class PlotlyWebBackend(RenderBackend):
    """Rendering backend drawing each surface with plotly.js in a QWebEngineView.

    Surfaces must be created with ``add_surface`` before a controller draws
    into them.

    Args:
        static_dir: Directory served to the pages (a temporary one if omitted).
        port: Local HTTP port, 0 for an ephemeral one.
    """

    def __init__(self, static_dir: Optional[Path] = None, *, port: int = 0):
        self._owns_dir = static_dir is None
        self._static_root = Path(static_dir) if static_dir else Path(
            tempfile.mkdtemp(prefix="pylinkedscatterqt-")
        )
        _prepare_static_root(self._static_root)
        self._server = _StaticServer(self._static_root, port=port)
        self._server.start()

        self._views: Dict[str, PlotlyWebView] = {}
        self._hover = HoverDispatcher()

    def add_surface(self, surface_id: str, parent: Optional[QWidget] = None) -> PlotlyWebView:
        if surface_id in self._views:
            raise ValueError(f"surface {surface_id!r} already exists")
        url = f"{self._server.base_url}/{PAGE_NAME}"
        view = PlotlyWebView(
            surface_id,
            url,
            lambda kind, ev: self._dispatch(surface_id, kind, ev),
            parent,
        )
        self._views[surface_id] = view
        return view

    def view(self, surface_id: str) -> PlotlyWebView:
        try:
            return self._views[surface_id]
        except KeyError:
            raise KeyError(f"unknown surface {surface_id!r}; call add_surface first") from None

    def close(self) -> None:
        self._server.shutdown()
        if self._owns_dir:
            shutil.rmtree(self._static_root, ignore_errors=True)

    def _dispatch(self, surface_id: str, kind: str, ev: Dict[str, Any]) -> None:
        if kind not in ("hover", "unhover"):
            return
        self._hover.emit(kind, hover_event_from_payload(surface_id, ev))

    # ---------- RenderBackend ----------
    def new_plot(
        self,
        surface_id: str,
        traces: Sequence[Trace],
        layout: Layout,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.view(surface_id).send(
            {
                "op": "newPlot",
                "traces": list(traces),
                "layout": layout,
                "config": dict(config or {}),
            }
        )

    def react(self, surface_id: str, traces: Sequence[Trace], layout: Layout) -> None:
        self.view(surface_id).send({"op": "react", "traces": list(traces), "layout": layout})

    def restyle(
        self, surface_id: str, update: Mapping[str, Any], trace_indices: Sequence[int]
    ) -> None:
        self.view(surface_id).send(
            {"op": "restyle", "update": dict(update), "traces": list(trace_indices)}
        )

    def on_hover(self, surface_id: str, callback: HoverCallback) -> None:
        self._hover.add("hover", surface_id, callback)

    def on_unhover(self, surface_id: str, callback: HoverCallback) -> None:
        self._hover.add("unhover", surface_id, callback)
