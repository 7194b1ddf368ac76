import json
import logging
import sys
import tempfile
from pathlib import Path

import numpy as np

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from pylinkedscatterqt import (
    PlotContext,
    PlotLink,
    PlotSourceConfig,
    SinglePlot,
)
from pylinkedscatterqt.param_slider import ParameterPanel
from pylinkedscatterqt.web_view import PlotlyWebBackend

ROCKTYPES = ["granite", "granodiorite", "tonalite", "syenite", "monzonite", "diorite"]


def make_compositions(n, rng):
    """
    Return (qap, labels): n random Q/A/P compositions summing to 1 and a
    rock type per row, clustered so the embedding has visible structure.
    """
    centers = rng.dirichlet([2.0, 2.0, 2.0], size=len(ROCKTYPES))
    kind = rng.integers(0, len(ROCKTYPES), size=n)
    qap = np.array([rng.dirichlet(centers[k] * 40.0) for k in kind])
    labels = [ROCKTYPES[k] for k in kind]
    return qap, labels


def fake_embedding(qap, n_neighbors, min_dist, rng):
    # Stand-in for a UMAP run: rotate/scale the composition plane and add
    # jitter that grows with min_dist.
    ang = np.deg2rad(n_neighbors * 7.0)
    rot = np.array([[np.cos(ang), -np.sin(ang)], [np.sin(ang), np.cos(ang)]])
    xy = qap[:, :2] @ rot * (10.0 / np.sqrt(n_neighbors))
    xy += rng.normal(0.0, 0.05 + min_dist, size=xy.shape)
    return [[float(x), float(y)] for x, y in xy]


def write_datasets(root, n=600, seed=7):
    rng = np.random.default_rng(seed)
    qap, labels = make_compositions(n, rng)

    qap_doc = {
        "ternary": [[float(q), float(a), float(p)] for q, a, p in qap],
        "rocktype": labels,
    }
    projections = {}
    for n_neighbors in (5, 15, 30, 50):
        for min_dist in (0.0, 0.1, 0.25, 0.5):
            # mixed precision keys, as written by different precompute runs
            d_text = f"{min_dist:.2f}" if n_neighbors == 30 else repr(min_dist)
            key = f"n={n_neighbors},d={d_text}"
            projections[key] = {"embedding": fake_embedding(qap, n_neighbors, min_dist, rng)}
    umap_doc = {"rocktype": labels, "projections": projections}

    qap_path = Path(root) / "qap.json"
    umap_path = Path(root) / "umap.json"
    qap_path.write_text(json.dumps(qap_doc), encoding="utf-8")
    umap_path.write_text(json.dumps(umap_doc), encoding="utf-8")
    return str(qap_path), str(umap_path)


def main():
    logging.basicConfig(level=logging.INFO)
    app = QApplication(sys.argv)

    data_dir = tempfile.mkdtemp(prefix="pylinkedscatterqt-demo-")
    qap_path, umap_path = write_datasets(data_dir)

    win = QMainWindow()
    win.setWindowTitle("pylinkedscatterqt demo: QAP composition vs. UMAP grid")
    win.resize(1400, 800)

    backend = PlotlyWebBackend()
    app.aboutToQuit.connect(backend.close)
    context = PlotContext(backend)

    splitter = QSplitter(Qt.Horizontal)
    win.setCentralWidget(splitter)

    splitter.addWidget(backend.add_surface("qap"))

    right = QWidget()
    right_layout = QVBoxLayout(right)
    right_layout.setContentsMargins(0, 0, 0, 0)
    right_layout.addWidget(backend.add_surface("umap"), 1)
    splitter.addWidget(right)
    splitter.setSizes([650, 750])

    ternary = SinglePlot(
        PlotSourceConfig(
            "qap",
            qap_path,
            coords_key="ternary",
            color_key="rocktype",
            title="QAP",
            kind="ternary",
        ),
        context,
    )
    umap = SinglePlot(
        PlotSourceConfig(
            "umap",
            umap_path,
            coords_key="embedding",
            color_key="rocktype",
            title="UMAP",
            grid_field="projections",
        ),
        context,
    )

    panel = ParameterPanel(umap.selection)
    right_layout.addWidget(panel)

    status = QLabel("Hover a point in either plot")
    right_layout.addWidget(status)

    ternary.load()
    umap.load()
    context.hover_sync.register_and_link(PlotLink([ternary, umap]))

    def on_hover(ev):
        stats = context.hover_sync.stats
        status.setText(
            f"row {stats.last_index}  (processed {stats.processed}, dropped {stats.dropped})"
        )

    backend.on_hover("qap", on_hover)
    backend.on_hover("umap", on_hover)

    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
