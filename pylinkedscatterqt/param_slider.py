"""Qt slider widgets for parameter grid selection.

This module provides single-handle sliders bound to ``ValueSelector`` models
and a panel holding the ``n`` / ``d`` pair of a ``GridSelection``.

Key features:
  - Slider positions are value indices (min 0, step 1)
  - Bounds follow the selector whenever it is (re)configured
  - Value label formatted by the selector (``n`` as integer, ``d`` as 0.00)
  - Input moves the selector, which triggers the plot redraw

Typical usage:

    plot = SinglePlot(config, context)
    panel = ParameterPanel(plot.selection)
    layout.addWidget(panel)
    plot.load()

Google-style docstrings + PEP8.
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QGroupBox, QHBoxLayout, QLabel, QSlider, QVBoxLayout, QWidget

from .controls import GridSelection, ValueSelector


class ParameterSliderWidget(QWidget):
    """A labelled slider over the values of a ``ValueSelector``.

    Signals:
        indexChanged(int): Emitted after the selector index changes.
    """

    indexChanged = Signal(int)

    def __init__(
        self,
        selector: ValueSelector,
        label: str,
        parent: Optional[QWidget] = None,
    ) -> None:
        """Initialize the slider.

        Args:
            selector: Model driven by this slider.
            label: Parameter name shown left of the slider.
            parent: Parent widget.
        """
        super().__init__(parent)
        self._selector = selector
        self._syncing = False

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        layout.addWidget(QLabel(f"{label}: "))
        self._value_label = QLabel()
        self._value_label.setMinimumWidth(40)
        layout.addWidget(self._value_label)

        self._slider = QSlider(Qt.Horizontal)
        self._slider.valueChanged.connect(self._on_slider_changed)
        layout.addWidget(self._slider, 1)

        selector.on_configured(self._sync_from_selector)
        selector.subscribe(self._on_selector_input)
        self._sync_from_selector()

    @property
    def selector(self) -> ValueSelector:
        return self._selector

    @property
    def slider(self) -> QSlider:
        return self._slider

    def value_text(self) -> str:
        return self._value_label.text()

    def _sync_from_selector(self) -> None:
        """Copy bounds and position from the selector without feedback."""
        self._syncing = True
        try:
            self._slider.setMinimum(self._selector.minimum)
            self._slider.setMaximum(self._selector.maximum)
            self._slider.setSingleStep(self._selector.step)
            self._slider.setValue(self._selector.index)
        finally:
            self._syncing = False
        self._value_label.setText(self._selector.current_text())

    def _on_slider_changed(self, position: int) -> None:
        if self._syncing:
            return
        self._selector.select(position)

    def _on_selector_input(self, index: int) -> None:
        if self._slider.value() != index:
            self._syncing = True
            try:
                self._slider.setValue(index)
            finally:
                self._syncing = False
        self._value_label.setText(self._selector.current_text())
        self.indexChanged.emit(index)


class ParameterPanel(QGroupBox):
    """Boxed pair of sliders for a grid plot's ``n`` and ``d`` parameters."""

    def __init__(
        self,
        selection: GridSelection,
        parent: Optional[QWidget] = None,
        *,
        title: str = "UMAP Parameters",
        n_label: str = "n_neighbors",
        d_label: str = "min_dist",
    ) -> None:
        super().__init__(title, parent)
        self._selection = selection

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        self.n_slider = ParameterSliderWidget(selection.n_selector, n_label)
        self.d_slider = ParameterSliderWidget(selection.d_selector, d_label)
        layout.addWidget(self.n_slider)
        layout.addWidget(self.d_slider)

    @property
    def selection(self) -> GridSelection:
        return self._selection
