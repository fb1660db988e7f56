"""pyqtgraph charts: dashboard peak history and dataset evolution overview."""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QWidget

from thermalsentinel.config import HIGH_TEMP_C
from thermalsentinel.model.records import EvolutionPoint, HistoryPoint

ACCENT_ORANGE = "#f97316"
ACCENT_RED = "#ef4444"


class PeakHistoryChart(pg.PlotWidget):
    """Line chart of the most recent alert peaks, labelled HH:MM."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setLabel("left", "Peak", units="°C")
        self.showGrid(x=False, y=True, alpha=0.3)
        self.setMouseEnabled(x=False, y=False)
        self._curve = self.plot(
            pen=pg.mkPen(ACCENT_ORANGE, width=2),
            symbol="o",
            symbolSize=4,
            symbolBrush=ACCENT_ORANGE,
        )
        self._threshold = pg.InfiniteLine(
            pos=HIGH_TEMP_C, angle=0, movable=False, pen=pg.mkPen(ACCENT_RED, style=Qt.DashLine)
        )
        self.addItem(self._threshold)

    def set_history(self, history: Sequence[HistoryPoint]) -> None:
        xs = np.arange(len(history), dtype=float)
        ys = np.array([p.temp for p in history], dtype=float)
        self._curve.setData(xs, ys)
        ticks = [(float(i), p.time_label) for i, p in enumerate(history)]
        self.getAxis("bottom").setTicks([ticks])
        if len(ys):
            self.setYRange(ys.min() - 5, ys.max() + 5, padding=0)


class EvolutionChart(pg.PlotWidget):
    """Filled max-temperature curve and average curve over all frames of a dataset, with a frame cursor."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setLabel("left", "Max", units="°C")
        self.setLabel("bottom", "Frame")
        self.showGrid(x=True, y=True, alpha=0.3)
        self._curve = self.plot(
            pen=pg.mkPen(ACCENT_RED, width=2),
            fillLevel=0,
            brush=pg.mkBrush(239, 68, 68, 60),
        )
        self._avg_curve = self.plot(pen=pg.mkPen(ACCENT_ORANGE, width=1))
        self._cursor = pg.InfiniteLine(angle=90, movable=False, pen=pg.mkPen("#94a3b8", style=Qt.DashLine))
        self.addItem(self._cursor)

    def set_evolution(self, points: Sequence[EvolutionPoint]) -> None:
        xs = np.array([p.frame_index for p in points], dtype=float)
        ys = np.array([p.max_temp for p in points], dtype=float)
        self._curve.setData(xs, ys)
        self._avg_curve.setData(xs, np.array([p.avg_temp for p in points], dtype=float))
        if len(ys):
            self._curve.setFillLevel(float(ys.min()))
            self.enableAutoRange()

    def set_cursor(self, frame_index: int) -> None:
        self._cursor.setValue(frame_index)
