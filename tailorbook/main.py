from __future__ import annotations

import logging
import os
import sys

from PySide6.QtWidgets import QApplication, QDialog

from tailorbook.data import database
from tailorbook.services.session import SessionManager
from tailorbook.ui.login_dialog import LoginDialog
from tailorbook.ui.main_window import APP_NAME, MainWindow


def _configure_logging() -> None:
    level_name = os.environ.get("TAILORBOOK_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    _configure_logging()
    database.initialize()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    session_manager = SessionManager()
    login = LoginDialog(session_manager=session_manager)
    if login.exec() != QDialog.DialogCode.Accepted or login.session() is None:
        return 0

    window = MainWindow(session_manager)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
