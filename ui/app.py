from __future__ import annotations
import logging
import os
import sys

from PySide6.QtWidgets import QApplication, QDialog, QMessageBox

from core.config import build_store, load_settings
from core.services.auth_service import AuthService
from ui.main_window import MainWindow
from ui.widgets.login_dialog import LoginDialog


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("WEBPENSE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    settings = load_settings()
    store = build_store(settings)
    if not store.is_configured():
        QMessageBox.warning(None, "Configuration",
                            "URL du script Google absente : renseigne WEBPENSE_APPS_SCRIPT_URL "
                            "ou apps_script_url dans data/settings.json.")

    auth = AuthService(settings)
    session = auth.restore()
    if not session.is_authenticated:
        dlg = LoginDialog(auth)
        if dlg.exec() != QDialog.Accepted:
            return 0
        session = dlg.session

    win = MainWindow(settings, store, auth, session)
    win.show()
    try:
        return app.exec()
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
