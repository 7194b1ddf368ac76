"""Grid plot with parameter sliders, loading from files or URLs.

Usage:

    python examples/02_grid_sliders_from_url.py QAP_JSON UMAP_JSON

Each argument may be a local path or an http(s) URL. The QAP document needs a
``ternary`` list of [q, a, p] rows; the UMAP document needs a ``projections``
mapping keyed ``n=<int>,d=<real>`` whose slices hold an ``embedding`` list.
Category labels are read from ``rocktype`` (or the legacy ``rocktypes``).
"""

import logging
import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QMainWindow, QSplitter, QVBoxLayout, QWidget

from pylinkedscatterqt import (
    DataFetchError,
    DatasetShapeError,
    EmptyGridError,
    HoverSyncOptions,
    PlotContext,
    PlotLink,
    PlotSourceConfig,
    SinglePlot,
)
from pylinkedscatterqt.param_slider import ParameterPanel
from pylinkedscatterqt.web_view import PlotlyWebBackend

logger = logging.getLogger("grid_sliders")


def main():
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    qap_location, umap_location = sys.argv[1], sys.argv[2]

    app = QApplication(sys.argv[:1])
    backend = PlotlyWebBackend()
    app.aboutToQuit.connect(backend.close)
    # snappier hover than the default 250 ms
    context = PlotContext(backend, options=HoverSyncOptions(throttle_ms=80))

    win = QMainWindow()
    win.setWindowTitle("QAP / UMAP")
    splitter = QSplitter(Qt.Horizontal)
    splitter.addWidget(backend.add_surface("qap"))
    right = QWidget()
    right_layout = QVBoxLayout(right)
    right_layout.addWidget(backend.add_surface("umap"), 1)
    splitter.addWidget(right)
    win.setCentralWidget(splitter)

    ternary = SinglePlot(
        PlotSourceConfig(
            "qap", qap_location, coords_key="ternary", color_key="rocktype",
            title="QAP", kind="ternary",
        ),
        context,
    )
    umap = SinglePlot(
        PlotSourceConfig(
            "umap", umap_location, coords_key="embedding", color_key="rocktype",
            title="UMAP", grid_field="projections",
        ),
        context,
    )
    right_layout.addWidget(ParameterPanel(umap.selection))

    try:
        ternary.load()
        umap.load()
    except (DataFetchError, EmptyGridError, DatasetShapeError) as e:
        logger.error("Could not load datasets: %s", e)
        sys.exit(1)

    context.hover_sync.register_and_link(PlotLink([ternary, umap]))

    win.resize(1400, 800)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
