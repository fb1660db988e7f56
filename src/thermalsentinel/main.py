"""
Application Initialization
==========================
This module wires the controllers to the views and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the backend client and the alert state machine.
2. Instantiates the Main Window (View) around them.
3. Prevents circular import errors by being the orchestrator.
"""
import logging
import os
import sys
from typing import Optional

from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtWidgets import QApplication

from thermalsentinel.config import API_BASE_URL
from thermalsentinel.controller.alerts import AlertStateMachine
from thermalsentinel.controller.polling import PollingLoop
from thermalsentinel.model.api import ApiClient
from thermalsentinel.view.main_window import VISIBLE_APP_NAME, MainWindow

logger = logging.getLogger(__name__)

ORG_ID = "sentinelcore"
APP_ID = "thermal-sentinel"


def create_app(argv: Optional[list[str]] = None) -> QApplication:
    """Create and configure the QApplication instance."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication(argv if argv is not None else sys.argv)
    app.setApplicationDisplayName(VISIBLE_APP_NAME)
    return app


def main(api_url: str = API_BASE_URL, synthetic: bool = False) -> None:
    app = create_app()

    client = ApiClient(base_url=api_url, synthetic_fallback=synthetic)
    loop = PollingLoop(client, AlertStateMachine())
    logger.info(f"Connecting to {client.base_url}")

    window = MainWindow(client, loop)
    window.show()
    window.start()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
