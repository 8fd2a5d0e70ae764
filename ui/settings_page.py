# settings_page.py
# Página de configurações da conta

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QPushButton, QLabel, QGroupBox, QHBoxLayout
)

from core.config import load_config, save_config
from core.exceptions import AuthRequired
from core.orchestrator import DeletionOrchestrator
from core.session import SessionContext
from ui.dialogs.account_deletion_dialog import AccountDeletionDialog
from ui.styles import QSS_POPUP_DARK, QSS_POPUP_LIGHT


class SettingsPage(QWidget):
    # Emitido quando não há mais sessão (logout ou conta excluída)
    logged_out = pyqtSignal()

    def __init__(self, orchestrator: DeletionOrchestrator, session: SessionContext,
                 app=None, toast_cb=None):
        super().__init__()
        self.setObjectName("settings-page")
        self.orchestrator = orchestrator
        self.session = session
        self.app = app
        self.toast_cb = toast_cb

        layout = QVBoxLayout(self)

        # === SEÇÃO: CONTA ===
        account_group = QGroupBox("👤 Minha Conta")
        account_layout = QVBoxLayout()
        self.lbl_name = QLabel("—")
        self.lbl_name.setStyleSheet("font-weight: bold;")
        self.lbl_email = QLabel("—")
        account_layout.addWidget(self.lbl_name)
        account_layout.addWidget(self.lbl_email)

        btn_account_layout = QHBoxLayout()
        self.btn_logout = QPushButton("Sair")
        self.btn_logout.clicked.connect(self.logout)
        self.btn_delete = QPushButton("Excluir conta")
        self.btn_delete.setObjectName("danger")
        self.btn_delete.clicked.connect(self.open_deletion_dialog)
        btn_account_layout.addWidget(self.btn_logout)
        btn_account_layout.addWidget(self.btn_delete)
        account_layout.addLayout(btn_account_layout)
        account_group.setLayout(account_layout)
        layout.addWidget(account_group)

        # === SEÇÃO: TEMA ===
        theme_group = QGroupBox("🎨 Aparência")
        theme_layout = QVBoxLayout()
        self.lbl_tema = QLabel("Tema atual: —")
        theme_layout.addWidget(self.lbl_tema)
        btn_layout = QHBoxLayout()
        self.btn_dark = QPushButton("Tema Escuro")
        self.btn_light = QPushButton("Tema Claro")
        btn_layout.addWidget(self.btn_dark)
        btn_layout.addWidget(self.btn_light)
        theme_layout.addLayout(btn_layout)
        theme_group.setLayout(theme_layout)
        layout.addWidget(theme_group)

        layout.addStretch(1)

        self.btn_dark.clicked.connect(lambda: self.set_theme("dark"))
        self.btn_light.clicked.connect(lambda: self.set_theme("light"))

        # Aplica tema salvo ao abrir
        theme = load_config().get("theme", "light")
        self.update_tema_label(theme)
        if self.app:
            self.app.setStyleSheet(QSS_POPUP_DARK if theme == "dark" else QSS_POPUP_LIGHT)
        self.refresh_user()

    def refresh_user(self):
        user = self.session.current_user()
        self.lbl_name.setText(user.name or "—" if user else "Nenhum usuário logado")
        self.lbl_email.setText(user.email or "" if user else "")
        self.btn_delete.setEnabled(user is not None)
        self.btn_logout.setEnabled(user is not None)

    def set_theme(self, theme: str):
        if self.app:
            self.app.setStyleSheet(QSS_POPUP_DARK if theme == "dark" else QSS_POPUP_LIGHT)
        config = load_config()
        config["theme"] = theme
        save_config(config)
        self.update_tema_label(theme)
        if self.toast_cb:
            self.toast_cb(f"Tema {'escuro' if theme == 'dark' else 'claro'} ativado e salvo.")

    def update_tema_label(self, tema):
        self.lbl_tema.setText(f"Tema atual: {'Escuro' if tema == 'dark' else 'Claro'}")

    def open_deletion_dialog(self):
        try:
            dlg = AccountDeletionDialog(self.orchestrator, self.session, self)
        except AuthRequired:
            self.refresh_user()
            self.logged_out.emit()
            return
        dlg.account_deleted.connect(self._on_account_deleted)
        dlg.exec()

    def _on_account_deleted(self):
        # A sessão já foi invalidada pelo orquestrador
        self.refresh_user()
        self.logged_out.emit()

    def logout(self):
        self.session.invalidate()
        self.refresh_user()
        self.logged_out.emit()
