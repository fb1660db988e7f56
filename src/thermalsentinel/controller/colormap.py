"""
Colour Mapping
==============
Scalar temperature -> RGB, for both the 2D raster and the 3D terrain.

Two families live here:
    * Palette.HEAT / Palette.GRAY - channel-wise ramps used by the raster view.
    * hue_ramp - an HSL sweep from blue (cold) to red (hot) used for terrain
      vertex colours. The two are intentionally not pixel-identical.

Every function is pure; the vectorized variants produce exactly the same
values as the scalar ones so both views agree with single-pixel lookups.
"""
from __future__ import annotations

import math
from enum import StrEnum

import numpy as np
import numpy.typing as npt

from thermalsentinel.utils import clamp, guarded_range

RGB = tuple[int, int, int]

HUE_COLD = 240.0 / 360.0  # blue
HUE_HOT = 0.0             # red


class Palette(StrEnum):
    HEAT = "heat"
    GRAY = "gray"


def normalize(value: float, min_temp: float, max_temp: float) -> float:
    """Position of value within [min_temp, max_temp], clamped to [0, 1]."""
    return clamp((value - min_temp) / guarded_range(min_temp, max_temp), 0.0, 1.0)


def map_value(value: float, min_temp: float, max_temp: float, palette: Palette = Palette.HEAT) -> RGB:
    """
    Map one temperature to an RGB triple in [0, 255].

    Heat: red saturates in the lower half, green only rises in the upper
    half, blue fades linearly: blue at the minimum, magenta at mid-range,
    yellow at the maximum.
    Gray: floor(norm * 255) on all channels.
    """
    norm = normalize(value, min_temp, max_temp)
    if palette == Palette.GRAY:
        level = math.floor(norm * 255)
        return level, level, level

    r = clamp(norm * 2, 0.0, 1.0) * 255
    g = clamp((norm - 0.5) * 2, 0.0, 1.0) * 255
    b = clamp(1 - norm, 0.0, 1.0) * 255
    return round(r), round(g), round(b)


def normalize_array(values: npt.ArrayLike, min_temp: float, max_temp: float) -> npt.NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    return np.clip((arr - min_temp) / guarded_range(min_temp, max_temp), 0.0, 1.0)


def map_array(
    values: npt.ArrayLike,
    min_temp: float,
    max_temp: float,
    palette: Palette = Palette.HEAT,
) -> npt.NDArray[np.uint8]:
    """Vectorized map_value. Returns an (..., 3) uint8 array."""
    norm = normalize_array(values, min_temp, max_temp)
    if palette == Palette.GRAY:
        level = np.floor(norm * 255)
        rgb = np.stack([level, level, level], axis=-1)
    else:
        r = np.clip(norm * 2, 0.0, 1.0) * 255
        g = np.clip((norm - 0.5) * 2, 0.0, 1.0) * 255
        b = np.clip(1 - norm, 0.0, 1.0) * 255
        # np.rint rounds half to even, same as the builtin round()
        rgb = np.rint(np.stack([r, g, b], axis=-1))
    return rgb.astype(np.uint8)


def _hue_to_channel(p: npt.NDArray[np.float64], q: npt.NDArray[np.float64], t: npt.NDArray[np.float64]):
    t = np.mod(t, 1.0)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, q, p + (q - p) * (2 / 3 - t) * 6],
        default=p,
    )


def hsl_to_rgb(
    hue: npt.ArrayLike,
    saturation: float = 1.0,
    lightness: float = 0.5,
) -> npt.NDArray[np.float64]:
    """HSL -> RGB with every component in [0, 1]. `hue` may be an array."""
    h = np.asarray(hue, dtype=np.float64)
    if saturation == 0:
        gray = np.full(h.shape, lightness)
        return np.stack([gray, gray, gray], axis=-1)

    q = lightness * (1 + saturation) if lightness < 0.5 else lightness + saturation - lightness * saturation
    p = 2 * lightness - q
    p_arr = np.full(h.shape, p)
    q_arr = np.full(h.shape, q)
    return np.stack([
        _hue_to_channel(p_arr, q_arr, h + 1 / 3),
        _hue_to_channel(p_arr, q_arr, h),
        _hue_to_channel(p_arr, q_arr, h - 1 / 3),
    ], axis=-1)


def hue_ramp(values: npt.ArrayLike, min_temp: float, max_temp: float) -> npt.NDArray[np.float64]:
    """Terrain colours: hue = (1 - norm) * 240°, full saturation, mid lightness."""
    norm = normalize_array(values, min_temp, max_temp)
    return hsl_to_rgb((1.0 - norm) * HUE_COLD)
