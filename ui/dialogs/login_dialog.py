# login_dialog.py
# Diálogo de login de usuário

import os
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QIcon
from PyQt6.QtWidgets import QDialog, QDialogButtonBox, QFormLayout, QLabel, QLineEdit, QVBoxLayout

from core.logger import log_warning
from core.services import AuthService
from core.session import SessionContext
from ui.dialogs.custom_messagebox import CustomMessageBox


class LoginDialog(QDialog):
    def __init__(self, auth_service: AuthService, session: SessionContext,
                 web_url: Optional[str] = None, parent=None):
        super().__init__(parent)
        self.auth_service = auth_service
        self.session = session
        self.setWindowTitle("Login de Usuário")
        self.setMinimumWidth(340)
        # Definir ícone da janela
        ico_path = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "assets", "icons", "logo.ico")
        if os.path.exists(ico_path):
            self.setWindowIcon(QIcon(ico_path))
        # QSS exclusivo para tela de login, sempre fundo #debffa
        self.setStyleSheet("""
            QDialog {
                background: #debffa;
                border-radius: 16px;
            }
            QLabel {
                color: #3d246c;
                font-family: 'Segoe UI', Arial, sans-serif;
            }
            QLineEdit {
                background: #f6edff;
                color: #3d246c;
                border: 1.5px solid #bfa2e0;
                border-radius: 8px;
                padding: 7px 12px;
                font-size: 15px;
            }
            QLineEdit:focus {
                border: 1.5px solid #a259e6;
                background: #fff;
            }
            QDialogButtonBox QPushButton {
                background: #a259e6;
                color: #fff;
                border-radius: 8px;
                padding: 7px 22px;
                font-weight: bold;
                border: none;
            }
            QLabel#ip-info {
                background: #a259e6;
                color: #fff;
                border-radius: 8px;
                padding: 10px;
                font-weight: bold;
                font-size: 13px;
            }
        """)
        vbox = QVBoxLayout(self)
        vbox.setContentsMargins(32, 24, 32, 24)
        vbox.setSpacing(10)

        # Endereço da API local, quando o servidor está ativo
        if web_url:
            ip_info = QLabel(f"📱 API de exclusão disponível em:\n{web_url}")
            ip_info.setObjectName("ip-info")
            ip_info.setAlignment(Qt.AlignmentFlag.AlignCenter)
            ip_info.setWordWrap(True)
            vbox.addWidget(ip_info)

        title = QLabel("<b>Açucaradas Encomendas</b>")
        title.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        title.setStyleSheet("font-size: 18px; margin-bottom: 8px;")
        vbox.addWidget(title)

        # Formulário
        form = QFormLayout()
        form.setSpacing(16)
        self.email = QLineEdit()
        self.email.setPlaceholderText("Digite seu e-mail")
        self.password = QLineEdit(); self.password.setEchoMode(QLineEdit.EchoMode.Password)
        self.password.setPlaceholderText("Digite sua senha")
        form.addRow("E-mail:", self.email)
        form.addRow("Senha:", self.password)
        vbox.addLayout(form)

        # Botões
        btns = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        btns.accepted.connect(self._on_accept)
        btns.rejected.connect(self.reject)
        vbox.addWidget(btns)

    def get_values(self):
        return self.email.text().strip(), self.password.text()

    def _on_accept(self):
        """Handler quando usuário clica em OK"""
        email, password = self.get_values()
        if not email or not password:
            CustomMessageBox.show_message(self, "Login", "Informe e-mail e senha.")
            return
        user = self.auth_service.authenticate(email, password)
        if user is None:
            log_warning(f"Tentativa de login inválida para {email}")
            CustomMessageBox.show_message(self, "Login", "E-mail ou senha inválidos.")
            self.password.clear()
            return
        self.session.create_login_session(user.id, user.name, user.email)
        self.accept()
