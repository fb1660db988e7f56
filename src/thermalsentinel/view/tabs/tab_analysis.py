"""
Analysis Tab
Alert list on the left, overview / 2D / 3D / AI views in the middle,
incident metadata on the right.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QButtonGroup, QCheckBox, QFileDialog, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QListWidget,
    QListWidgetItem, QMessageBox, QProgressBar, QPushButton, QSlider, QSplitter, QStackedWidget,
    QTextEdit, QVBoxLayout, QWidget
)

from thermalsentinel.config import resolve_api_key
from thermalsentinel.controller.advisory import run_advisory
from thermalsentinel.controller.colormap import Palette
from thermalsentinel.controller.frame_sync import (
    EvolutionRequest, FrameRequest, FrameSyncController, SyncState, ViewMode
)
from thermalsentinel.controller.raster import RasterCompositor
from thermalsentinel.controller.workers import WorkerPool
from thermalsentinel.model.api import ApiClient
from thermalsentinel.model.io import IOManager
from thermalsentinel.model.records import AlertRecord
from thermalsentinel.view.widgets.charts import EvolutionChart
from thermalsentinel.view.widgets.raster_view import RasterView
from thermalsentinel.view.widgets.terrain_view import TerrainWidget

logger = logging.getLogger(__name__)

_PAGE = {ViewMode.OVERVIEW: 0, ViewMode.RASTER: 1, ViewMode.TERRAIN: 2, ViewMode.ADVISORY: 3}


class AnalysisPanel(QWidget):
    advisory_finished = Signal(str)

    def __init__(self, client: ApiClient, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.client = client
        self.workers = WorkerPool(self)
        self.sync = FrameSyncController(
            on_frame_request=self._dispatch_frame_request,
            on_evolution_request=self._dispatch_evolution_request,
        )
        self.sync.add_listener(self._on_sync_changed)
        self.compositor = RasterCompositor()
        self.alerts: list[AlertRecord] = []
        self.selected_alert: Optional[AlertRecord] = None
        self._remote_key: Optional[str] = None
        self._shown_frame = None

        splitter = QSplitter(Qt.Horizontal)
        root = QHBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(splitter)

        # --- LEFT: Alert list ---
        grp_alerts = QGroupBox("Recent incidents")
        l_alerts = QVBoxLayout(grp_alerts)
        self.alert_list = QListWidget()
        self.alert_list.currentRowChanged.connect(self.on_alert_selected)
        l_alerts.addWidget(self.alert_list)
        self.btn_refresh = QPushButton("Refresh")
        self.btn_refresh.clicked.connect(self.load_alerts)
        l_alerts.addWidget(self.btn_refresh)
        splitter.addWidget(grp_alerts)

        # --- CENTER: Visualization ---
        center = QWidget()
        l_center = QVBoxLayout(center)

        toolbar = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        self.mode_group.setExclusive(True)
        for mode, text in (
            (ViewMode.OVERVIEW, "Overview"),
            (ViewMode.RASTER, "2D matrix"),
            (ViewMode.TERRAIN, "3D surface"),
            (ViewMode.ADVISORY, "AI analysis"),
        ):
            btn = QPushButton(text)
            btn.setCheckable(True)
            btn.setChecked(mode == ViewMode.OVERVIEW)
            self.mode_group.addButton(btn, _PAGE[mode])
            toolbar.addWidget(btn)
        self.mode_group.idClicked.connect(self.on_mode_clicked)
        toolbar.addStretch()
        self.chk_gray = QCheckBox("Grayscale")
        self.chk_gray.toggled.connect(self.on_palette_toggled)
        toolbar.addWidget(self.chk_gray)
        l_center.addLayout(toolbar)

        self.stack = QStackedWidget()
        self.evolution_chart = EvolutionChart()
        self.raster_view = RasterView()
        self.terrain_view = TerrainWidget()
        self.terrain_view.set_active(False)
        self.stack.addWidget(self.evolution_chart)
        self.stack.addWidget(self.raster_view)
        self.stack.addWidget(self.terrain_view)
        self.stack.addWidget(self._build_advisory_page())
        l_center.addWidget(self.stack, stretch=1)

        self.lbl_status = QLabel("Select an alert to begin")
        self.lbl_status.setAlignment(Qt.AlignCenter)
        l_center.addWidget(self.lbl_status)

        hbox_slider = QHBoxLayout()
        self.lbl_frame = QLabel("Frame: -")
        hbox_slider.addWidget(self.lbl_frame)
        self.slider = QSlider(Qt.Horizontal)
        self.slider.setEnabled(False)
        self.slider.setRange(0, 0)
        self.slider.valueChanged.connect(self.on_slider_changed)
        hbox_slider.addWidget(self.slider)
        l_center.addLayout(hbox_slider)
        splitter.addWidget(center)

        # --- RIGHT: Metadata ---
        grp_meta = QGroupBox("Metadata")
        form = QFormLayout(grp_meta)
        self.lbl_id = QLabel("-")
        self.lbl_dataset = QLabel("-")
        self.lbl_angle = QLabel("-")
        self.severity = QProgressBar()
        self.severity.setRange(0, 100)
        self.severity.setTextVisible(False)
        form.addRow("ID:", self.lbl_id)
        form.addRow("Dataset:", self.lbl_dataset)
        form.addRow("Angle:", self.lbl_angle)
        form.addRow("Severity:", self.severity)
        self.btn_export = QPushButton("Export frame...")
        self.btn_export.setEnabled(False)
        self.btn_export.clicked.connect(self.on_export_clicked)
        form.addRow(self.btn_export)
        splitter.addWidget(grp_meta)

        splitter.setSizes([250, 800, 250])
        self.advisory_finished.connect(self._on_advisory_text)

    def _build_advisory_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.lbl_ai_peak = QLabel("Thermal peak: -")
        self.lbl_ai_file = QLabel("File: -")
        layout.addWidget(self.lbl_ai_peak)
        layout.addWidget(self.lbl_ai_file)
        self.btn_analyse = QPushButton("Analyse incident")
        self.btn_analyse.clicked.connect(self.on_analyse_clicked)
        layout.addWidget(self.btn_analyse)
        self.txt_ai = QTextEdit()
        self.txt_ai.setReadOnly(True)
        layout.addWidget(self.txt_ai, stretch=1)
        return page

    # ------------------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------------------

    def set_remote_key(self, key: Optional[str]) -> None:
        self._remote_key = key

    def load_alerts(self) -> None:
        self.btn_refresh.setEnabled(False)
        self.workers.submit(self.client.get_alerts, self._on_alerts_loaded, self._on_alerts_failed, tag="alerts")

    def _on_alerts_loaded(self, _tag, alerts: list[AlertRecord]) -> None:
        self.btn_refresh.setEnabled(True)
        self.alerts = alerts
        self.alert_list.blockSignals(True)
        self.alert_list.clear()
        for alert in alerts:
            day = datetime.fromtimestamp(alert.timestamp).strftime("%Y-%m-%d")
            item = QListWidgetItem(f"{day}  {alert.max_temp:.1f} °C\n{alert.turbine_token}")
            self.alert_list.addItem(item)
        self.alert_list.blockSignals(False)
        if not alerts:
            self.lbl_status.setText("No alerts recorded")
            return
        if self.sync.local_source is None:
            self.alert_list.setCurrentRow(0)

    def _on_alerts_failed(self, _tag, message: str) -> None:
        self.btn_refresh.setEnabled(True)
        logger.error(f"Error fetching alerts: {message}")
        self.lbl_status.setText("Alerts could not be loaded.")

    def on_alert_selected(self, row: int) -> None:
        if not 0 <= row < len(self.alerts):
            return
        alert = self.alerts[row]
        self.selected_alert = alert
        self.lbl_id.setText(alert.id)
        self.lbl_dataset.setText(alert.dataset_path)
        self.lbl_angle.setText(f"{alert.angle:.1f}°")
        self.severity.setValue(int(alert.severity * 100))
        self.lbl_ai_peak.setText(f"Thermal peak: {alert.max_temp:.1f} °C")
        self.lbl_ai_file.setText(f"File: {alert.dataset_path}")
        self.txt_ai.clear()

        self.mode_group.button(_PAGE[ViewMode.OVERVIEW]).setChecked(True)
        self._show_mode(ViewMode.OVERVIEW)
        self.sync.view_mode = ViewMode.OVERVIEW
        self.sync.select_dataset(alert.dataset_path)

    # ------------------------------------------------------------------------------
    # Fetch dispatch (FrameSyncController -> workers -> FrameSyncController)
    # ------------------------------------------------------------------------------

    def _dispatch_frame_request(self, request: FrameRequest) -> None:
        self.workers.submit(
            lambda: self.client.get_thermal_matrix(request.dataset, request.frame_index),
            lambda req, frame: self.sync.resolve(req, frame),
            lambda req, message: self.sync.fail(req, message),
            tag=request,
        )

    def _dispatch_evolution_request(self, request: EvolutionRequest) -> None:
        self.workers.submit(
            lambda: self.client.get_evolution(request.dataset),
            lambda req, points: self.sync.resolve_evolution(req, points),
            lambda req, message: self.sync.fail_evolution(req, message),
            tag=request,
        )

    # ------------------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------------------

    def on_mode_clicked(self, page: int) -> None:
        mode = next(m for m, p in _PAGE.items() if p == page)
        self._show_mode(mode)
        self.sync.set_view_mode(mode)

    def on_slider_changed(self, value: int) -> None:
        self.sync.select_frame(value)
        self.evolution_chart.set_cursor(value)

    def on_palette_toggled(self, gray: bool) -> None:
        self.compositor.palette = Palette.GRAY if gray else Palette.HEAT
        self._render_frame(force=True)

    def on_analyse_clicked(self) -> None:
        if self.selected_alert is None:
            return
        alert = self.selected_alert
        frame = self.sync.frame
        remote_key = self._remote_key
        self.btn_analyse.setEnabled(False)
        self.btn_analyse.setText("Analysing...")
        self.txt_ai.clear()
        if resolve_api_key(remote_key) is None:
            # Precondition failure: answer immediately, no worker
            self._on_advisory_text(run_advisory(alert, frame, remote_key=remote_key))
            return
        self.workers.submit(
            lambda: run_advisory(alert, frame, remote_key=remote_key),
            lambda _tag, text: self.advisory_finished.emit(text),
            lambda _tag, message: self.advisory_finished.emit(message),
            tag="advisory",
        )

    def open_frame_file(self, path: str) -> bool:
        """Show an exported HDF5 frame in place of the backend data."""
        try:
            frame = IOManager.load_frame(path)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Opening frame file failed: {e}")
            QMessageBox.critical(self, "Open failed", str(e))
            return False
        self.alert_list.blockSignals(True)
        self.alert_list.setCurrentRow(-1)
        self.alert_list.blockSignals(False)
        self.selected_alert = None
        self.lbl_id.setText("-")
        self.lbl_dataset.setText(path)
        self.lbl_angle.setText("-")
        self.severity.setValue(0)
        self.txt_ai.clear()
        if self.sync.view_mode == ViewMode.OVERVIEW:
            self.mode_group.button(_PAGE[ViewMode.RASTER]).setChecked(True)
            self._show_mode(ViewMode.RASTER)
            self.sync.view_mode = ViewMode.RASTER
        self.sync.open_local(frame, path)
        return True

    def _on_advisory_text(self, text: str) -> None:
        self.btn_analyse.setEnabled(True)
        self.btn_analyse.setText("Analyse incident")
        self.txt_ai.setPlainText(text)

    def on_export_clicked(self) -> None:
        frame = self.sync.frame
        if frame is None:
            return
        default_name = f"{self.sync.dataset or 'frame'}_{frame.frame_index}.h5".replace("/", "_")
        path, _ = QFileDialog.getSaveFileName(self, "Export frame", default_name, "HDF5 (*.h5)")
        if not path:
            return
        try:
            IOManager.save_frame(frame, path, dataset=self.sync.dataset or "")
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))

    # ------------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------------

    def _show_mode(self, mode: ViewMode) -> None:
        self.stack.setCurrentIndex(_PAGE[mode])
        self.terrain_view.set_active(mode == ViewMode.TERRAIN)

    def _on_sync_changed(self, sync: FrameSyncController) -> None:
        self.slider.blockSignals(True)
        self.slider.setRange(0, sync.max_frame_index)
        self.slider.setValue(sync.frame_index)
        self.slider.setEnabled(sync.frame_count > 1)
        self.slider.blockSignals(False)
        self.lbl_frame.setText(f"Frame: {sync.frame_index} / {sync.max_frame_index}")
        self.evolution_chart.set_evolution(sync.evolution)
        self.evolution_chart.set_cursor(sync.frame_index)
        self.btn_export.setEnabled(sync.frame is not None)

        if sync.state == SyncState.ERROR:
            self.lbl_status.setText(f"Visualization not available. {sync.error}")
        elif sync.state == SyncState.LOADING and sync.frame is None:
            self.lbl_status.setText("Loading frame...")
        else:
            self.lbl_status.setText("")
        self._render_frame()

    def _render_frame(self, force: bool = False) -> None:
        frame = self.sync.frame
        if frame is None:
            self.compositor.clear()
            if self.sync.state == SyncState.ERROR:
                self.raster_view.set_placeholder("Visualization not available")
            else:
                self.raster_view.set_buffer(None)
            self.terrain_view.show_frame(None)
            self._shown_frame = None
            return
        if frame is self._shown_frame and not force:
            return
        self._shown_frame = frame
        self.raster_view.set_buffer(self.compositor.update(frame))
        self.terrain_view.show_frame(frame)

    def shutdown(self) -> None:
        self.workers.wait_all()
