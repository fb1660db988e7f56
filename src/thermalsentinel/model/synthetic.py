"""Generated thermal frames for demos and offline development."""
from __future__ import annotations

from typing import Optional

import numpy as np

from thermalsentinel.model.records import ThermalFrame

SYNTHETIC_WIDTH = 256
SYNTHETIC_HEIGHT = 192


def synthetic_frame(
    frame_index: int,
    base_temp: float = 25.0,
    width: int = SYNTHETIC_WIDTH,
    height: int = SYNTHETIC_HEIGHT,
    rng: Optional[np.random.Generator] = None,
) -> ThermalFrame:
    """
    A field with one hotspot orbiting the image centre as frame_index grows.

    Temperature is base + max(0, 40 - dist) * 1.5 plus up to 1.5 °C of noise.
    """
    rng = rng or np.random.default_rng()
    center_x = width / 2 + np.sin(frame_index * 0.1) * (width / 4)
    center_y = height / 2 + np.cos(frame_index * 0.1) * (height / 4)

    ys, xs = np.mgrid[0:height, 0:width]
    dist = np.sqrt((xs - center_x) ** 2 + (ys - center_y) ** 2)
    noise = rng.random((height, width)) * 1.5
    heat = base_temp + np.maximum(0.0, 40.0 - dist) * 1.5 + noise

    pixels = heat.ravel()
    return ThermalFrame(
        frame_index=frame_index,
        width=width,
        height=height,
        pixels=pixels,
        min_temp=float(pixels.min()),
        max_temp=float(pixels.max()),
    )
