"""
Raster Compositing
Turns a ThermalFrame into an RGBA image buffer, one output pixel per sample.
"""
from __future__ import annotations

import numpy as np
import numpy.typing as npt

from thermalsentinel.controller.colormap import Palette, map_array
from thermalsentinel.model.records import ThermalFrame


def composite(frame: ThermalFrame, palette: Palette = Palette.HEAT) -> npt.NDArray[np.uint8]:
    """
    Colour every sample of the frame with the frame's own min/max range.

    Returns:
        C-contiguous uint8 array of shape (height, width, 4), alpha fixed at
        255, so `buffer.size == width * height * 4` and the flat RGBA layout
        matches what QImage.Format_RGBA8888 expects.
    """
    rgb = map_array(frame.pixels, frame.min_temp, frame.max_temp, palette)
    rgba = np.empty((frame.width * frame.height, 4), dtype=np.uint8)
    rgba[:, :3] = rgb
    rgba[:, 3] = 255
    return np.ascontiguousarray(rgba.reshape(frame.height, frame.width, 4))


class RasterCompositor:
    """Holds the last composited buffer per surface so stale images are replaced, never mixed."""

    def __init__(self, palette: Palette = Palette.HEAT) -> None:
        self.palette = palette
        self._buffer: npt.NDArray[np.uint8] | None = None
        self._frame_index: int | None = None

    @property
    def buffer(self) -> npt.NDArray[np.uint8] | None:
        return self._buffer

    @property
    def frame_index(self) -> int | None:
        return self._frame_index

    def update(self, frame: ThermalFrame | None) -> npt.NDArray[np.uint8] | None:
        """Recomposite for a new frame, or drop the buffer when the frame is cleared."""
        if frame is None:
            self.clear()
            return None
        self._buffer = composite(frame, self.palette)
        self._frame_index = frame.frame_index
        return self._buffer

    def clear(self) -> None:
        self._buffer = None
        self._frame_index = None
