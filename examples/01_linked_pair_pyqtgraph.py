"""Linked pair on the native pyqtgraph backend.

Shows a PlotPair (ternary composition + one fixed embedding slice) drawn with
PyQtGraphBackend, so no QtWebEngine is needed. Hovering a point in either plot
marks the same row in the other one.
"""

import logging
import sys

import numpy as np
from PySide6.QtWidgets import QApplication, QHBoxLayout, QMainWindow, QWidget

from pylinkedscatterqt import PlotContext, PlotPair, PlotSourceConfig, make_key_fn
from pylinkedscatterqt.qtgraph_backend import PyQtGraphBackend


def create_documents(n=400, seed=3):
    """Create in-memory QAP and embedding-grid documents."""
    rng = np.random.default_rng(seed)
    qap = rng.dirichlet([1.5, 1.0, 2.0], size=n)
    labels = ["quartz-rich" if q > 0.4 else "feldspar-rich" for q in qap[:, 0]]

    projections = {}
    for n_neighbors in (10, 20):
        for min_dist in (0.1, 0.3):
            xy = qap[:, :2] * n_neighbors + rng.normal(0, min_dist, size=(n, 2))
            projections[f"n={n_neighbors},d={min_dist:.2f}"] = {"embedding": xy.tolist()}

    return {
        "qap.json": {"ternary": qap.tolist(), "rocktype": labels},
        "umap.json": {"rocktype": labels, "projections": projections},
    }


class LinkedPairWindow(QMainWindow):
    """Ternary + embedding pair side by side."""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Linked pair (pyqtgraph)")
        self.resize(1200, 550)

        documents = create_documents()
        self.backend = PyQtGraphBackend()
        self.context = PlotContext(self.backend, fetcher=documents.__getitem__)

        central = QWidget()
        layout = QHBoxLayout(central)
        layout.addWidget(self.backend.add_surface("qap"))
        layout.addWidget(self.backend.add_surface("umap"))
        self.setCentralWidget(central)

        # d=0.1 is stored as "0.10"; the resolver finds it through the
        # fixed-decimals fallback
        self.pair = PlotPair(
            PlotSourceConfig(
                "qap", "qap.json", coords_key="ternary", color_key="rocktype",
                title="QAP", kind="ternary",
            ),
            PlotSourceConfig(
                "umap", "umap.json", coords_key="embedding", color_key="rocktype",
                title="UMAP", grid_field="projections",
                param_key_fn=make_key_fn(20, 0.1),
            ),
            self.context,
        )
        self.pair.load()


def main():
    logging.basicConfig(level=logging.DEBUG)
    app = QApplication(sys.argv)
    win = LinkedPairWindow()
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
