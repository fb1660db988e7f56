"""
2D Raster Widget
Shows a composited RGBA buffer as an un-interpolated (blocky) image that
keeps the frame's aspect ratio whatever the widget size.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap, QResizeEvent
from PySide6.QtWidgets import QLabel, QSizePolicy, QWidget


def rgba_to_qimage(buffer: npt.NDArray[np.uint8]) -> QImage:
    """(height, width, 4) uint8 -> deep-copied QImage."""
    height, width, _ = buffer.shape
    data = np.ascontiguousarray(buffer)
    image = QImage(data.data, width, height, width * 4, QImage.Format.Format_RGBA8888)
    # QImage does not own numpy memory
    return image.copy()


class RasterView(QLabel):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumSize(160, 120)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setStyleSheet("background-color: black; border: 1px solid #334155;")
        self._pixmap: Optional[QPixmap] = None

    def set_buffer(self, buffer: Optional[npt.NDArray[np.uint8]]) -> None:
        """Replace the shown image; None blanks the view."""
        if buffer is None:
            self._pixmap = None
            self.clear()
            return
        self._pixmap = QPixmap.fromImage(rgba_to_qimage(buffer))
        self._rescale()

    def set_placeholder(self, text: str) -> None:
        self._pixmap = None
        self.clear()
        self.setText(text)

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self._rescale()

    def _rescale(self) -> None:
        if self._pixmap is None:
            return
        scaled = self._pixmap.scaled(self.size(), Qt.KeepAspectRatio, Qt.FastTransformation)
        self.setPixmap(scaled)
