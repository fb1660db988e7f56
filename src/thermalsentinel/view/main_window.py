"""
Main Application Window
=======================
Tab bar on top, the live dashboard and the incident analysis below.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Lifetime: It starts the polling timers once shown and stops every timer
   and worker before the window closes.
"""
import logging
from typing import Optional

from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import QFileDialog, QMainWindow, QStackedWidget, QTabBar, QVBoxLayout, QWidget

from thermalsentinel.controller.polling import PollingLoop
from thermalsentinel.controller.workers import WorkerPool
from thermalsentinel.model.api import ApiClient
from thermalsentinel.model.records import RemoteConfig
from thermalsentinel.view.tabs.tab_analysis import AnalysisPanel
from thermalsentinel.view.tabs.tab_dashboard import DashboardPanel
from thermalsentinel.view.tabs.tab_files import FilesPanel
from thermalsentinel.view.tabs.tab_settings import SettingsPanel

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Thermal Sentinel"


class MainWindow(QMainWindow):
    def __init__(self, client: ApiClient, loop: PollingLoop, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.client = client
        self.loop = loop
        self.workers = WorkerPool(self)

        self.setWindowTitle(f"{VISIBLE_APP_NAME} - {client.base_url}")
        self.resize(1400, 900)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- 1. TOP TAB BAR ---
        self.tab_bar = QTabBar()
        self.tab_bar.setDrawBase(True)
        self.tab_bar.setShape(QTabBar.RoundedNorth)
        self.tab_bar.setExpanding(True)
        self.tab_bar.addTab("Live dashboard")
        self.tab_bar.addTab("Incident analysis")
        self.tab_bar.addTab("Files")
        self.tab_bar.addTab("Settings")
        self.tab_bar.setStyleSheet("""
                    QTabBar::tab { height: 35px; min-width: 100px; }
                    QTabBar::tab:selected { font-weight: bold; }
                """)
        main_layout.addWidget(self.tab_bar)

        # --- 2. CONTENT ---
        self.stack = QStackedWidget()
        self.dashboard = DashboardPanel(loop)
        self.analysis = AnalysisPanel(client)
        self.files = FilesPanel(client)
        self.settings = SettingsPanel(client)
        self.stack.addWidget(self.dashboard)  # Index 0
        self.stack.addWidget(self.analysis)   # Index 1
        self.stack.addWidget(self.files)      # Index 2
        self.stack.addWidget(self.settings)   # Index 3

        self.settings.config_saved.connect(self.apply_config)
        main_layout.addWidget(self.stack)

        self.tab_bar.currentChanged.connect(self.on_tab_changed)

        self._create_menus()

    def _create_menus(self) -> None:
        self.act_refresh = QAction("Refresh alerts", self)
        self.act_refresh.setShortcut("F5")
        self.act_refresh.triggered.connect(self.analysis.load_alerts)

        self.act_open = QAction("Open frame...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_open_frame)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        file_menu = self.menuBar().addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_refresh)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    def start(self) -> None:
        """Begin polling and fetch the remote configuration once."""
        self.dashboard.start()
        self.workers.submit(self.client.get_config, self._on_config, self._on_config_error, tag="config")

    def _on_config(self, _tag, config: RemoteConfig) -> None:
        logger.info(f"Remote configuration loaded (trigger {config.max_temp_trigger} °C).")
        self.apply_config(config)

    def apply_config(self, config: RemoteConfig) -> None:
        self.analysis.set_remote_key(config.api_key)
        self.settings.set_config(config)

    def _on_config_error(self, _tag, message: str) -> None:
        logger.warning(f"Remote configuration unavailable: {message}")

    def on_tab_changed(self, index: int) -> None:
        self.stack.setCurrentIndex(index)
        if index == 1 and not self.analysis.alerts:
            self.analysis.load_alerts()
        elif index == 2 and not self.files.files:
            self.files.load()

    def on_open_frame(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open frame", "", "HDF5 (*.h5 *.hdf5)")
        if not path:
            return
        if self.analysis.open_frame_file(path):
            self.tab_bar.setCurrentIndex(1)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.dashboard.stop()
        self.analysis.shutdown()
        self.files.shutdown()
        self.settings.shutdown()
        self.workers.wait_all()
        super().closeEvent(event)
