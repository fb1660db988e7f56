"""
Pointer Picking
===============
Ray-casts from the camera through a pointer position and turns the nearest
terrain hit back into a temperature.

Everything here is a pure function of (pointer, camera, terrain): nothing is
cached between calls, so a freshly rebuilt mesh can never be answered from a
stale lookup.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import numpy.typing as npt

from thermalsentinel.controller.terrain import TerrainMesh

logger = logging.getLogger(__name__)

Vector3 = npt.NDArray[np.float64]


@dataclass(frozen=True)
class Camera:
    """
    Perspective camera.

    Attributes:
        position: Eye position in world space.
        focal_point: Point the camera looks at.
        view_up: Approximate up direction; re-orthogonalised internally.
        view_angle: Vertical field of view in degrees (VTK convention).
        aspect: Viewport width / height.
    """
    position: Sequence[float]
    focal_point: Sequence[float]
    view_up: Sequence[float] = (0.0, 1.0, 0.0)
    view_angle: float = 30.0
    aspect: float = 1.0

    @classmethod
    def from_pyvista(cls, camera, aspect: float) -> Camera:
        return cls(
            position=tuple(camera.position),
            focal_point=tuple(camera.focal_point),
            view_up=tuple(camera.up),
            view_angle=float(camera.view_angle),
            aspect=aspect,
        )

    def basis(self) -> tuple[Vector3, Vector3, Vector3]:
        """(right, up, forward) unit vectors."""
        forward = np.asarray(self.focal_point, dtype=float) - np.asarray(self.position, dtype=float)
        norm = np.linalg.norm(forward)
        if norm == 0:
            raise ValueError("Camera position and focal point coincide.")
        forward /= norm
        right = np.cross(forward, np.asarray(self.view_up, dtype=float))
        r_norm = np.linalg.norm(right)
        if r_norm == 0:
            raise ValueError("view_up is parallel to the viewing direction.")
        right /= r_norm
        up = np.cross(right, forward)
        return right, up, forward

    @property
    def _tan_half_fov(self) -> float:
        return float(np.tan(np.radians(self.view_angle) / 2.0))

    def ray_direction(self, ndc_x: float, ndc_y: float) -> Vector3:
        """Unit direction through a point in normalized device coordinates ([-1, 1], +y up)."""
        right, up, forward = self.basis()
        t = self._tan_half_fov
        direction = forward + ndc_x * t * self.aspect * right + ndc_y * t * up
        return direction / np.linalg.norm(direction)

    def project(self, point: Sequence[float]) -> tuple[float, float]:
        """World point -> NDC. Inverse of ray_direction for points in front of the camera."""
        right, up, forward = self.basis()
        d = np.asarray(point, dtype=float) - np.asarray(self.position, dtype=float)
        depth = float(d @ forward)
        if depth <= 0:
            raise ValueError("Point is behind the camera.")
        t = self._tan_half_fov
        return float(d @ right) / (depth * t * self.aspect), float(d @ up) / (depth * t)


@dataclass(frozen=True)
class PickResult:
    world_point: tuple[float, float, float]
    estimated_temp: float


def pointer_to_ndc(x: float, y: float, width: int, height: int) -> tuple[float, float]:
    """Widget pixel coordinates (origin top-left) -> NDC."""
    if width <= 0 or height <= 0:
        return 0.0, 0.0
    return 2.0 * x / width - 1.0, 1.0 - 2.0 * y / height


def pick(pointer_ndc: tuple[float, float], camera: Camera, terrain: Optional[TerrainMesh]) -> Optional[PickResult]:
    """
    Nearest intersection of the pointer ray with the terrain surface.

    Only terrain.surface is tested; the reference plane and the ground grid
    are never hit. Returns None on a miss, and for a degenerate camera
    (view_up parallel to the view direction, e.g. mid-orbit over the top).
    """
    if terrain is None or terrain.surface.n_cells == 0:
        return None

    origin = np.asarray(camera.position, dtype=float)
    try:
        direction = camera.ray_direction(*pointer_ndc)
    except ValueError as e:
        logger.debug(f"Skipping pick: {e}")
        return None

    # Long enough to cross the whole surface from wherever the camera sits
    center = np.asarray(terrain.surface.center, dtype=float)
    reach = np.linalg.norm(center - origin) + 2.0 * terrain.surface.length
    end = origin + direction * reach

    points, _cells = terrain.surface.ray_trace(origin, end)
    if len(points) == 0:
        return None

    points = np.asarray(points, dtype=float).reshape(-1, 3)
    nearest = points[np.argmin(np.linalg.norm(points - origin, axis=1))]
    estimated = terrain.temperature_at_height(float(nearest[2]))
    return PickResult(world_point=(float(nearest[0]), float(nearest[1]), float(nearest[2])), estimated_temp=estimated)
