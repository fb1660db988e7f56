"""
Live Dashboard Tab
Polls the backend every POLL_INTERVAL_MS, shows the latest telemetry and the
overheat notification.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QFormLayout, QGroupBox, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from thermalsentinel.config import HIGH_TEMP_C, POLL_INTERVAL_MS
from thermalsentinel.controller.alerts import AlertStateMachine, NotificationState
from thermalsentinel.controller.polling import PollingLoop, TelemetrySnapshot
from thermalsentinel.controller.workers import WorkerPool
from thermalsentinel.view.widgets.charts import PeakHistoryChart
from thermalsentinel.view.widgets.notification_banner import NotificationBanner

logger = logging.getLogger(__name__)


class DashboardPanel(QWidget):
    def __init__(self, loop: PollingLoop, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.loop = loop
        self.machine: AlertStateMachine = loop.machine
        self.workers = WorkerPool(self)
        self._poll_in_flight = False

        layout = QVBoxLayout(self)

        self.banner = NotificationBanner(self)
        layout.addWidget(self.banner)

        # --- KPIs ---
        grp_kpi = QGroupBox("Live telemetry")
        form = QFormLayout(grp_kpi)
        self.lbl_temp = QLabel("-")
        self.lbl_angle = QLabel("-")
        self.lbl_token = QLabel("-")
        self.lbl_update = QLabel("-")
        self.lbl_mode = QLabel("-")
        form.addRow("Max. temperature:", self.lbl_temp)
        form.addRow("Rotation angle:", self.lbl_angle)
        form.addRow("Turbine ID:", self.lbl_token)
        form.addRow("Last sync:", self.lbl_update)
        form.addRow("Mode:", self.lbl_mode)
        layout.addWidget(grp_kpi)

        hbox = QHBoxLayout()
        self.lbl_hotspot = QLabel("Normal scan")
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: #f87171;")
        hbox.addWidget(self.lbl_hotspot)
        hbox.addStretch()
        hbox.addWidget(self.lbl_error)
        layout.addLayout(hbox)

        # --- History ---
        grp_hist = QGroupBox("Peak history (°C)")
        l_hist = QVBoxLayout(grp_hist)
        self.chart = PeakHistoryChart()
        l_hist.addWidget(self.chart)
        layout.addWidget(grp_hist, stretch=1)

        # --- Timers ---
        self.poll_timer = QTimer(self)
        self.poll_timer.setInterval(POLL_INTERVAL_MS)
        self.poll_timer.timeout.connect(self.request_poll)

        # Fires the alert machine's delayed transitions
        self.alert_timer = QTimer(self)
        self.alert_timer.setSingleShot(True)
        self.alert_timer.timeout.connect(self.on_alert_timer)

        self.loop.add_listener(self.on_snapshot)
        self.machine.add_listener(self.on_notification)

    # ------------------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------------------

    def start(self) -> None:
        self.request_poll()
        self.poll_timer.start()

    def stop(self) -> None:
        self.poll_timer.stop()
        self.alert_timer.stop()
        self.workers.wait_all()

    def request_poll(self) -> None:
        if self._poll_in_flight:
            logger.debug("Previous poll still running, skipping tick.")
            return
        self._poll_in_flight = True
        self.workers.submit(self.loop.fetch, self._on_poll_result, self._on_poll_error, tag="poll")

    def _on_poll_result(self, _tag, result) -> None:
        self._poll_in_flight = False
        self.loop.apply(result)
        self._arm_alert_timer()

    def _on_poll_error(self, _tag, message: str) -> None:
        self._poll_in_flight = False
        self.loop.apply_error(message)
        self._arm_alert_timer()

    def on_alert_timer(self) -> None:
        self.machine.advance(self.loop.clock.now())
        self._arm_alert_timer()

    def _arm_alert_timer(self) -> None:
        due = self.machine.next_due()
        if due is None:
            self.alert_timer.stop()
            return
        delay_ms = max(0, int((due - self.loop.clock.now()) * 1000))
        self.alert_timer.start(delay_ms)

    # ------------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------------

    def on_snapshot(self, snapshot: TelemetrySnapshot) -> None:
        self.lbl_error.setText(f"Sync error: {snapshot.last_error}" if snapshot.last_error else "")
        status = snapshot.status
        if status is None:
            return
        hot = status.is_hot(HIGH_TEMP_C)
        self.lbl_temp.setText(f"{status.current_max_temp:.1f} °C")
        self.lbl_temp.setStyleSheet("color: #ef4444; font-weight: bold;" if hot else "color: #fb923c;")
        self.lbl_angle.setText(f"{status.current_angle:.1f}°")
        self.lbl_token.setText(status.short_token)
        self.lbl_update.setText(status.last_update_label)
        online = "online" if status.is_online else "offline"
        self.lbl_mode.setText(f"{status.mode} ({online})")
        self.lbl_hotspot.setText("Hotspot detected" if hot else "Normal scan")
        self.chart.set_history(snapshot.history)

    def on_notification(self, _old: NotificationState, new: NotificationState) -> None:
        self.banner.show_state(new)
