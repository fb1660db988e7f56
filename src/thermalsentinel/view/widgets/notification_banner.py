"""Floating overheat notification, driven by NotificationState."""
from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from thermalsentinel.controller.alerts import NotificationState

_ALERT_STYLE = "QFrame { background-color: rgba(127, 29, 29, 230); border: 1px solid #ef4444; border-radius: 8px; }"
_INFO_STYLE = "QFrame { background-color: rgba(20, 83, 45, 230); border: 1px solid #22c55e; border-radius: 8px; }"


class NotificationBanner(QFrame):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)

        self.lbl_message = QLabel()
        self.lbl_message.setStyleSheet("color: white; font-weight: bold; border: none;")
        layout.addWidget(self.lbl_message)

        self.lbl_sub = QLabel()
        self.lbl_sub.setStyleSheet("color: white; font-size: 11px; border: none;")
        layout.addWidget(self.lbl_sub)

        self.setVisible(False)

    def show_state(self, state: NotificationState) -> None:
        if not state.visible:
            self.setVisible(False)
            return
        self.setStyleSheet(_ALERT_STYLE if state.is_alert else _INFO_STYLE)
        self.lbl_message.setText(state.message)
        self.lbl_sub.setText(state.sub_message)
        self.setVisible(True)
