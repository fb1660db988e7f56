import numpy as np
import pytest

from thermalsentinel.controller.colormap import Palette, hue_ramp, map_array, map_value


def test_heat_palette_endpoints():
    assert map_value(20.0, 20.0, 80.0) == (0, 0, 255)
    assert map_value(80.0, 20.0, 80.0) == (255, 255, 0)


def test_heat_palette_midpoint_is_magenta():
    assert map_value(50.0, 20.0, 80.0) == (255, 0, 128)


def test_gray_palette_floors():
    assert map_value(50.0, 20.0, 80.0, Palette.GRAY) == (127, 127, 127)
    assert map_value(80.0, 20.0, 80.0, Palette.GRAY) == (255, 255, 255)


@pytest.mark.parametrize("value, expected", [(-100.0, (0, 0, 255)), (500.0, (255, 255, 0))])
def test_out_of_range_values_are_clamped(value, expected):
    assert map_value(value, 20.0, 80.0) == expected


def test_flat_frame_does_not_divide_by_zero():
    assert map_value(42.0, 42.0, 42.0) == (0, 0, 255)
    assert map_array([42.0, 42.0], 42.0, 42.0).tolist() == [[0, 0, 255], [0, 0, 255]]


@pytest.mark.parametrize("palette", [Palette.HEAT, Palette.GRAY])
def test_map_array_agrees_with_map_value(palette):
    values = np.linspace(10.0, 90.0, 97)
    vectorized = map_array(values, 20.0, 80.0, palette)
    assert vectorized.dtype == np.uint8
    assert [tuple(int(c) for c in rgb) for rgb in vectorized] == [map_value(v, 20.0, 80.0, palette) for v in values]


def test_hue_ramp_runs_from_blue_to_red():
    colors = hue_ramp([0.0, 100.0], 0.0, 100.0)
    np.testing.assert_allclose(colors[0], [0.0, 0.0, 1.0])
    np.testing.assert_allclose(colors[1], [1.0, 0.0, 0.0])
    assert colors.min() >= 0.0 and colors.max() <= 1.0
