"""
3D Terrain Widget (PyVista Wrapper)
Renders a TerrainMesh and answers pointer hover with a temperature readout.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QVBoxLayout, QWidget
from PySide6.QtGui import QCloseEvent
import pyvista as pv
from pyvistaqt import QtInteractor

from thermalsentinel.controller.picking import Camera, PickResult, pick, pointer_to_ndc
from thermalsentinel.controller.terrain import TerrainMesh, TerrainMeshBuilder
from thermalsentinel.model.records import ThermalFrame

logger = logging.getLogger(__name__)


class TerrainWidget(QWidget):
    def __init__(self, parent: Optional[QWidget] = None, builder: Optional[TerrainMeshBuilder] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self.builder = builder or TerrainMeshBuilder()
        self._init_plotter()

        # --- Actors state ---
        self._surface_actor: Optional[pv.Actor] = None
        self._plane_actor: Optional[pv.Actor] = None
        self._grid_actor: Optional[pv.Actor] = None
        self._marker_actor: Optional[pv.Actor] = None

        self._terrain: Optional[TerrainMesh] = None
        self._active: bool = True
        self._deferred: Optional[ThermalFrame] = None
        self._has_deferred: bool = False
        self._last_pick: Optional[PickResult] = None

        self._attach_observers()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def terrain(self) -> Optional[TerrainMesh]:
        return self._terrain

    @property
    def last_pick(self) -> Optional[PickResult]:
        return self._last_pick

    def set_active(self, active: bool) -> None:
        """Inactive widgets skip picking and defer mesh rebuilds until shown again."""
        self._active = active
        if active and self._has_deferred:
            frame, self._deferred, self._has_deferred = self._deferred, None, False
            self.show_frame(frame)

    def show_frame(self, frame: Optional[ThermalFrame], reset_camera: bool = False) -> None:
        """Rebuild every layer from scratch for a new frame; None clears the scene."""
        if not self._active:
            self._deferred, self._has_deferred = frame, True
            return
        self._clear_scene()
        if frame is None:
            self._terrain = None
            self.plotter.render()
            return

        first = self._terrain is None
        self._terrain = self.builder.build(frame)
        logger.debug(f"Rendering terrain for frame {frame.frame_index}.")

        self._surface_actor = self.plotter.add_mesh(
            self._terrain.surface,
            scalars="rgb",
            rgb=True,
            smooth_shading=True,
            pickable=True,
            show_scalar_bar=False,
        )
        self._plane_actor = self.plotter.add_mesh(
            self._terrain.max_plane,
            color="#ef4444",
            opacity=0.15,
            pickable=False,
            show_scalar_bar=False,
        )
        self._grid_actor = self.plotter.add_mesh(
            self._terrain.ground_grid,
            color="#475569",
            line_width=1,
            opacity=0.6,
            pickable=False,
        )

        if first or reset_camera:
            self.plotter.reset_camera()
        self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background("#0f172a")
        self.plotter.enable_terrain_style(mouse_wheel_zooms=True)
        self.plotter.camera_position = [(0.0, -30.0, 25.0), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0)]

    def _attach_observers(self) -> None:
        iren = self.plotter.iren
        iren.add_observer("MouseMoveEvent", lambda *_: self._on_pointer_move())

    def _on_pointer_move(self) -> None:
        if not self._active or self._terrain is None:
            return
        x, y = self.plotter.iren.get_event_position()
        width, height = self.plotter.window_size
        # VTK event positions have their origin bottom-left
        ndc = pointer_to_ndc(x, height - y, width, height)
        camera = Camera.from_pyvista(self.plotter.camera, aspect=width / height if height else 1.0)
        self._last_pick = pick(ndc, camera, self._terrain)
        self._update_marker(self._last_pick)

    def _update_marker(self, result: Optional[PickResult]) -> None:
        if self._marker_actor is not None:
            self.plotter.remove_actor(self._marker_actor, render=False)
            self._marker_actor = None
        self.plotter.remove_actor("pick_label", render=False)

        if result is not None:
            sphere = pv.Sphere(radius=0.25, center=result.world_point)
            self._marker_actor = self.plotter.add_mesh(sphere, color="white", pickable=False)
            self.plotter.add_text(
                f"{result.estimated_temp:.1f} °C",
                position="upper_right",
                font_size=10,
                color="white",
                name="pick_label",
            )
        self.plotter.render()

    def _clear_scene(self) -> None:
        for actor in (self._surface_actor, self._plane_actor, self._grid_actor, self._marker_actor):
            if actor is not None:
                self.plotter.remove_actor(actor, render=False)
        self.plotter.remove_actor("pick_label", render=False)
        self._surface_actor = None
        self._plane_actor = None
        self._grid_actor = None
        self._marker_actor = None
        self._last_pick = None

    def closeEvent(self, event: QCloseEvent) -> None:
        self.plotter.close()
        event.accept()
