"""
Settings Tab
Edits the backend's RemoteConfig: master switch, alert trigger and scan
parameters. Load and save run on worker threads.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QCheckBox, QDoubleSpinBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QSpinBox, QVBoxLayout, QWidget
)

from thermalsentinel.controller.workers import WorkerPool
from thermalsentinel.model.api import ApiClient
from thermalsentinel.model.records import RemoteConfig

logger = logging.getLogger(__name__)


class SettingsPanel(QWidget):
    # Emitted after the backend accepted a new configuration
    config_saved = Signal(object)

    def __init__(self, client: ApiClient, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.client = client
        self.workers = WorkerPool(self)
        self.config = RemoteConfig()

        layout = QVBoxLayout(self)

        # --- Master switch ---
        self.chk_enabled = QCheckBox("System enabled (disabling parks the unit and stops scanning)")
        layout.addWidget(self.chk_enabled)

        # --- Scan parameters ---
        grp_scan = QGroupBox("Scan parameters")
        form = QFormLayout(grp_scan)

        self.spin_trigger = QDoubleSpinBox()
        self.spin_trigger.setRange(0.1, 199.9)
        self.spin_trigger.setDecimals(1)
        self.spin_trigger.setSingleStep(0.1)
        self.spin_trigger.setSuffix(" °C")
        form.addRow("Max. temperature trigger:", self.spin_trigger)

        self.spin_wait = QSpinBox()
        self.spin_wait.setRange(0, 3600)
        self.spin_wait.setSuffix(" s")
        form.addRow("Wait at scan edges:", self.spin_wait)

        self.spin_step = QDoubleSpinBox()
        self.spin_step.setRange(0.1, 45.0)
        self.spin_step.setDecimals(1)
        self.spin_step.setSingleStep(0.1)
        self.spin_step.setSuffix(" °")
        form.addRow("Pan step:", self.spin_step)

        self.edit_email = QLineEdit()
        self.edit_email.setPlaceholderText("admin@example.com")
        form.addRow("Alert e-mail:", self.edit_email)
        layout.addWidget(grp_scan)

        # --- Actions ---
        hbox = QHBoxLayout()
        self.btn_reload = QPushButton("Reload")
        self.btn_reload.clicked.connect(self.load)
        self.btn_save = QPushButton("Save to unit")
        self.btn_save.clicked.connect(self.on_save_clicked)
        hbox.addWidget(self.btn_reload)
        hbox.addStretch()
        hbox.addWidget(self.btn_save)
        layout.addLayout(hbox)

        self.lbl_message = QLabel("")
        layout.addWidget(self.lbl_message)
        layout.addStretch()

    # ------------------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------------------

    def load(self) -> None:
        self._set_busy(True, "Loading configuration...")
        self.workers.submit(self.client.get_config, self._on_loaded, self._on_load_failed, tag="config")

    def _on_loaded(self, _tag, config: RemoteConfig) -> None:
        self._set_busy(False, "")
        self.set_config(config)

    def _on_load_failed(self, _tag, message: str) -> None:
        self._set_busy(False, "Could not load the configuration from the server.")
        logger.error(f"Loading configuration failed: {message}")

    def on_save_clicked(self) -> None:
        config = self.form_config()
        try:
            config.validate()
        except ValueError as e:
            self._show_message(str(e), error=True)
            return
        self._set_busy(True, "Saving...")
        self.workers.submit(
            lambda: self.client.update_config(config),
            lambda _tag, _reply: self._on_saved(config),
            self._on_save_failed,
            tag="save",
        )

    def _on_saved(self, config: RemoteConfig) -> None:
        self.config = config
        self._set_busy(False, "")
        self._show_message("Configuration updated on the unit.")
        self.config_saved.emit(config)

    def _on_save_failed(self, _tag, message: str) -> None:
        self._set_busy(False, "")
        self._show_message("Error updating the configuration.", error=True)
        logger.error(f"Saving configuration failed: {message}")

    # ------------------------------------------------------------------------------
    # Form <-> RemoteConfig
    # ------------------------------------------------------------------------------

    def set_config(self, config: RemoteConfig) -> None:
        self.config = config
        self.chk_enabled.setChecked(config.system_enabled)
        self.spin_trigger.setValue(config.max_temp_trigger)
        self.spin_wait.setValue(int(config.scan_wait_time_sec))
        self.spin_step.setValue(config.pan_step_degrees)
        self.edit_email.setText(config.alert_email)

    def form_config(self) -> RemoteConfig:
        """Current form values; fields the form does not show are kept from the loaded config."""
        return replace(
            self.config,
            system_enabled=self.chk_enabled.isChecked(),
            max_temp_trigger=self.spin_trigger.value(),
            scan_wait_time_sec=float(self.spin_wait.value()),
            pan_step_degrees=self.spin_step.value(),
            alert_email=self.edit_email.text().strip(),
        )

    def _set_busy(self, busy: bool, text: str) -> None:
        self.btn_save.setEnabled(not busy)
        self.btn_reload.setEnabled(not busy)
        if text:
            self._show_message(text)

    def _show_message(self, text: str, error: bool = False) -> None:
        self.lbl_message.setStyleSheet("color: #f87171;" if error else "color: #4ade80;")
        self.lbl_message.setText(text)

    def shutdown(self) -> None:
        self.workers.wait_all()
