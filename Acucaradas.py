# Acucaradas.py
# Aplicação desktop: login, configurações da conta e exclusão de conta/dados

import sys

from PyQt6.QtWidgets import QApplication, QDialog, QMainWindow

from core.config import (
    get_database_path, get_log_directory, get_notification_settings, get_web_server_settings
)
from core.database import Database
from core.logger import configure_logging, log_error, log_event, log_startup
from core.notifier import notifier_from_settings
from core.orchestrator import DeletionOrchestrator
from core.services import AuthService
from core.session import SessionContext
from ui.dialogs.login_dialog import LoginDialog
from ui.settings_page import SettingsPage
from ui.styles import current_popup_qss


class MainWindow(QMainWindow):
    def __init__(self, orchestrator: DeletionOrchestrator, session: SessionContext,
                 auth: AuthService, web_url=None):
        super().__init__()
        self.session = session
        self.auth = auth
        self.web_url = web_url
        self.setWindowTitle("Açucaradas Encomendas")
        self.resize(520, 420)
        self.page_settings = SettingsPage(orchestrator, session, QApplication.instance(),
                                          toast_cb=self.show_toast)
        self.page_settings.logged_out.connect(self._back_to_login)
        self.setCentralWidget(self.page_settings)

    def show_toast(self, msg: str):
        self.statusBar().showMessage(msg, 4000)

    def login(self) -> bool:
        """Exige login até ter sucesso; False se o usuário desistir"""
        if self.session.is_logged_in():
            return True
        log_event("🔐 Iniciando processo de autenticação...")
        dlg = LoginDialog(self.auth, self.session, self.web_url)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            self.page_settings.refresh_user()
            return True
        log_event("❌ Login cancelado pelo usuário")
        return False

    def _back_to_login(self):
        self.hide()
        if self.login():
            self.show()
        else:
            QApplication.instance().quit()


def main() -> None:
    log_path = configure_logging(get_log_directory())
    db_path = get_database_path()
    log_startup(log_path, db_path)

    app = QApplication(sys.argv)
    app.setStyleSheet(current_popup_qss())

    try:
        db = Database(db_path)
    except Exception as e:
        log_error(f"ERRO FATAL: Não foi possível abrir o banco {db_path}", e)
        sys.exit(1)

    session = SessionContext()
    auth = AuthService(db)
    orchestrator = DeletionOrchestrator(
        db, session=session, notifier=notifier_from_settings(get_notification_settings())
    )

    web_url = None
    web = get_web_server_settings()
    if web['enabled']:
        from core.web_server import start_server
        start_server(orchestrator, session, host=web['host'], port=web['port'])
        web_url = f"http://{web['host']}:{web['port']}"

    win = MainWindow(orchestrator, session, auth, web_url)
    if not win.login():
        orchestrator.shutdown()
        db.close()
        sys.exit(0)

    win.show()
    code = app.exec()
    orchestrator.shutdown()
    db.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
