import numpy as np
import pytest

from thermalsentinel.controller.terrain import TerrainMeshBuilder


def test_one_vertex_per_pixel(ramp_frame):
    terrain = TerrainMeshBuilder().build(ramp_frame)
    assert terrain.surface.n_points == ramp_frame.width * ramp_frame.height
    assert terrain.surface.n_cells == 2 * (ramp_frame.width - 1) * (ramp_frame.height - 1)


def test_heights_span_zero_to_peak(ramp_frame):
    builder = TerrainMeshBuilder(height=10.0, z_scale=0.5)
    terrain = builder.build(ramp_frame)
    z = terrain.surface.points[:, 2]
    assert z.min() == pytest.approx(0.0)
    assert z.max() == pytest.approx(5.0)
    assert terrain.peak_z == pytest.approx(5.0)


def test_vertex_order_matches_pixels(ramp_frame):
    terrain = TerrainMeshBuilder().build(ramp_frame)
    np.testing.assert_allclose(terrain.surface.point_data["temperature"], ramp_frame.pixels)
    points = terrain.surface.points
    # columns grow along +x, rows grow along -y
    assert points[1, 0] > points[0, 0]
    assert points[ramp_frame.width, 1] < points[0, 1]
    hottest = int(np.argmax(ramp_frame.pixels))
    assert points[hottest, 2] == pytest.approx(terrain.peak_z)


def test_vertex_colours_follow_hue_ramp(ramp_frame):
    terrain = TerrainMeshBuilder().build(ramp_frame)
    rgb = terrain.surface.point_data["rgb"]
    assert tuple(rgb[int(np.argmin(ramp_frame.pixels))]) == (0, 0, 255)
    assert tuple(rgb[int(np.argmax(ramp_frame.pixels))]) == (255, 0, 0)


def test_height_inverts_to_temperature(ramp_frame):
    terrain = TerrainMeshBuilder().build(ramp_frame)
    for z, temp in zip(terrain.surface.points[:, 2], ramp_frame.pixels):
        assert terrain.temperature_at_height(z) == pytest.approx(temp)


def test_flat_frame_lies_on_the_ground(make_frame):
    terrain = TerrainMeshBuilder().build(make_frame(np.full((3, 4), 30.0)))
    assert np.allclose(terrain.surface.points[:, 2], 0.0)


def test_decorations_sit_at_peak_and_below_ground(ramp_frame):
    terrain = TerrainMeshBuilder().build(ramp_frame)
    assert np.allclose(terrain.max_plane.points[:, 2], terrain.peak_z)
    grid_z = terrain.ground_grid.points[:, 2]
    assert terrain.ground_grid.n_points > 0
    assert np.allclose(grid_z, grid_z[0])
    assert grid_z[0] < terrain.surface.points[:, 2].min()


def test_ground_grid_stays_inside_footprint(ramp_frame):
    terrain = TerrainMeshBuilder(extent=20.0).build(ramp_frame)
    x_min, x_max, y_min, y_max, _, _ = terrain.ground_grid.bounds
    # 5x4 pixels, cell 5: footprint 20 x 15
    assert (x_min, x_max) == pytest.approx((-10.0, 10.0))
    assert (y_min, y_max) == pytest.approx((-7.5, 7.5))


def test_rejects_non_positive_scale():
    with pytest.raises(ValueError):
        TerrainMeshBuilder(z_scale=0.0)
