"""
Terrain Mesh Builder
====================
Height-displaced, vertex-coloured surface for the 3D view.

One vertex per source pixel in the same row-major order as
ThermalFrame.pixels, so vertex i always carries pixel i. Heights run from 0
(coldest) to height * z_scale (hottest). Two decorations ride along: a
translucent plane at the maximum elevation and a ground grid. Both are built
as separate datasets so the view can add them with pickable=False.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import pyvista as pv

from thermalsentinel.config import TERRAIN_EXTENT, TERRAIN_HEIGHT, TERRAIN_Z_SCALE
from thermalsentinel.controller.colormap import hue_ramp
from thermalsentinel.model.records import ThermalFrame
from thermalsentinel.utils import guarded_range

logger = logging.getLogger(__name__)

# Ground grid sits this fraction of peak_z below the coldest vertices
GROUND_OFFSET = 0.02


@dataclass
class TerrainMesh:
    """Everything the 3D view needs for one frame."""
    surface: pv.PolyData
    max_plane: pv.PolyData
    ground_grid: pv.PolyData
    min_temp: float
    max_temp: float
    peak_z: float  # height * z_scale
    frame_index: int

    @property
    def temperature_range(self) -> float:
        return guarded_range(self.min_temp, self.max_temp)

    def temperature_at_height(self, z: float) -> float:
        """Inverse of the height formula."""
        norm = z / self.peak_z
        return self.min_temp + norm * self.temperature_range


class TerrainMeshBuilder:
    def __init__(
        self,
        height: float = TERRAIN_HEIGHT,
        z_scale: float = TERRAIN_Z_SCALE,
        extent: float = TERRAIN_EXTENT,
        grid_spacing: float | None = None,
    ) -> None:
        if height <= 0 or z_scale <= 0:
            raise ValueError("height and z_scale must be positive")
        self.height = height
        self.z_scale = z_scale
        self.extent = extent
        self.grid_spacing = grid_spacing

    @property
    def peak_z(self) -> float:
        return self.height * self.z_scale

    def build(self, frame: ThermalFrame) -> TerrainMesh:
        """Build surface, reference plane and ground grid from scratch."""
        logger.debug(f"Building terrain for frame {frame.frame_index} ({frame.width}x{frame.height}).")
        points = self.vertex_positions(frame)
        faces = self.grid_faces(frame.width, frame.height)

        surface = pv.PolyData(points, faces=faces) if faces.size else pv.PolyData(points)
        surface.point_data["temperature"] = np.array(frame.pixels)
        surface.point_data["rgb"] = (hue_ramp(frame.pixels, frame.min_temp, frame.max_temp) * 255).round().astype(np.uint8)
        if faces.size:
            # Keep point order: no vertex splitting
            surface = surface.compute_normals(
                cell_normals=False, point_normals=True, split_vertices=False, auto_orient_normals=False
            )

        x_size, y_size = self._footprint(frame.width, frame.height)
        max_plane = pv.Plane(
            center=(0.0, 0.0, self.peak_z),
            direction=(0.0, 0.0, 1.0),
            i_size=x_size,
            j_size=y_size,
            i_resolution=1,
            j_resolution=1,
        )
        ground_grid = self._build_xy_grid_polydata(
            (-x_size / 2, x_size / 2, -y_size / 2, y_size / 2),
            spacing=self.grid_spacing or max(x_size, y_size) / 10.0,
            z=-GROUND_OFFSET * self.peak_z,
        )

        return TerrainMesh(
            surface=surface,
            max_plane=max_plane,
            ground_grid=ground_grid,
            min_temp=frame.min_temp,
            max_temp=frame.max_temp,
            peak_z=self.peak_z,
            frame_index=frame.frame_index,
        )

    def vertex_positions(self, frame: ThermalFrame) -> npt.NDArray[np.float64]:
        """(width*height, 3) points; the grid is centred on the origin, row 0 at +y."""
        cell = self._cell_size(frame.width, frame.height)
        rows, cols = np.divmod(np.arange(frame.width * frame.height), frame.width)
        x = (cols - (frame.width - 1) / 2.0) * cell
        y = ((frame.height - 1) / 2.0 - rows) * cell
        norm = (frame.pixels - frame.min_temp) / guarded_range(frame.min_temp, frame.max_temp)
        z = norm * self.height * self.z_scale
        return np.column_stack([x, y, z]).astype(np.float64)

    @staticmethod
    def grid_faces(width: int, height: int) -> npt.NDArray[np.int_]:
        """
        Two triangles per quad of the (width-1) x (height-1) grid, in VTK
        padded-cell layout [3, a, b, c, 3, ...].
        """
        if width < 2 or height < 2:
            return np.empty(0, dtype=np.int_)
        r, c = np.mgrid[0:height - 1, 0:width - 1]
        v0 = (r * width + c).ravel()
        v1 = v0 + 1
        v2 = v0 + width
        v3 = v2 + 1
        three = np.full_like(v0, 3)
        tri_a = np.column_stack([three, v0, v2, v1])
        tri_b = np.column_stack([three, v1, v2, v3])
        return np.hstack([tri_a, tri_b]).ravel().astype(np.int_)

    def _cell_size(self, width: int, height: int) -> float:
        return self.extent / max(width - 1, height - 1, 1)

    def _footprint(self, width: int, height: int) -> tuple[float, float]:
        cell = self._cell_size(width, height)
        return max(width - 1, 1) * cell, max(height - 1, 1) * cell

    @staticmethod
    def _build_xy_grid_polydata(bounds, spacing, z: float = 0.0) -> pv.PolyData:
        """
        Create a grid of lines in a horizontal plane, clipped to `bounds`.

        Each axis is split into a whole number of cells close to `spacing`,
        so the outermost lines run exactly along the bounds.

        Args:
            bounds: (x_min, x_max, y_min, y_max)
            spacing: Approximate grid spacing in both directions.
            z: Height of the plane.

        Returns:
            A PyVista PolyData grid object.
        """
        x_min, x_max, y_min, y_max = bounds
        xs = np.linspace(x_min, x_max, max(1, round((x_max - x_min) / spacing)) + 1)
        ys = np.linspace(y_min, y_max, max(1, round((y_max - y_min) / spacing)) + 1)

        n_lines = len(xs) + len(ys)
        points = np.empty((n_lines * 2, 3), dtype=float)
        cells = np.empty(n_lines * 3, dtype=int)

        pid, cid = 0, 0
        for x in xs:
            points[pid] = (x, y_min, z)
            points[pid + 1] = (x, y_max, z)
            cells[cid:cid + 3] = (2, pid, pid + 1)
            pid += 2
            cid += 3
        for y in ys:
            points[pid] = (x_min, y, z)
            points[pid + 1] = (x_max, y, z)
            cells[cid:cid + 3] = (2, pid, pid + 1)
            pid += 2
            cid += 3

        return pv.PolyData(points, lines=cells)
