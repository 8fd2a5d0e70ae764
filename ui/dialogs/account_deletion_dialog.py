# account_deletion_dialog.py
# Tela de exclusão de conta e de dados

from typing import Dict, List, Optional

from PyQt6.QtCore import Qt, QThread, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox, QDialog, QGroupBox, QHBoxLayout, QLabel, QLineEdit, QPushButton, QVBoxLayout
)

from core.logger import log_event, log_warning
from core.models import CATEGORY_LABELS, DataCategory, DeletionOutcome
from core.orchestrator import DeletionOrchestrator, MSG_EMPTY_SELECTION
from core.session import SessionContext
from ui.dialogs.custom_messagebox import CustomMessageBox
from ui.styles import apply_popup_style, current_popup_qss

MSG_FAILURE = "Falha ao processar solicitação. Tente novamente."


class DeletionThread(QThread):
    """Thread que aguarda o worker de exclusão sem travar a interface"""

    completed = pyqtSignal(bool, str)  # (sucesso, mensagem)

    def __init__(self, orchestrator: DeletionOrchestrator, user_id: int, scope, reason: Optional[str] = None):
        super().__init__()
        self.orchestrator = orchestrator
        self.user_id = user_id
        self.scope = scope
        self.reason = reason
        self.outcome: Optional[DeletionOutcome] = None

    def run(self):
        try:
            self.outcome = self.orchestrator.initiate(self.user_id, self.scope, self.reason).result()
            self.completed.emit(self.outcome.ok, self.outcome.message)
        except Exception as e:
            self.completed.emit(False, f"Erro inesperado: {e}")


class AccountDeletionDialog(QDialog):
    """
    Exclusão completa da conta ou parcial (por categoria).
    Nada é excluído sem confirmação explícita.
    """

    account_deleted = pyqtSignal()

    def __init__(self, orchestrator: DeletionOrchestrator, session: SessionContext, parent=None):
        super().__init__(parent)
        self.orchestrator = orchestrator
        self.session = session
        self.user = session.require_authenticated()
        self.worker: Optional[DeletionThread] = None
        self._complete_requested = False

        self.setWindowTitle("Exclusão de Conta e Dados")
        self.setModal(True)
        self.setMinimumWidth(440)
        apply_popup_style(self)

        layout = QVBoxLayout(self)
        layout.setSpacing(12)

        intro = QLabel(
            "Você pode excluir sua conta por completo ou apenas alguns dos seus dados. "
            "Essas ações não podem ser desfeitas."
        )
        intro.setWordWrap(True)
        layout.addWidget(intro)

        # Aviso de solicitação pendente (informativo)
        self.lbl_pending = QLabel("⏳ Existe uma solicitação de exclusão pendente para esta conta.")
        self.lbl_pending.setWordWrap(True)
        self.lbl_pending.setStyleSheet("color: #b45309;")
        self.lbl_pending.setVisible(self.orchestrator.ledger.has_pending_request(self.user.user_id))
        layout.addWidget(self.lbl_pending)

        self.reason = QLineEdit()
        self.reason.setPlaceholderText("Motivo (opcional)")
        layout.addWidget(self.reason)

        self.btn_delete_account = QPushButton("Excluir minha conta")
        self.btn_delete_account.setObjectName("danger")
        self.btn_delete_account.clicked.connect(self._on_delete_account)
        layout.addWidget(self.btn_delete_account)

        self.btn_partial_deletion = QPushButton("Excluir apenas alguns dados")
        self.btn_partial_deletion.clicked.connect(self._toggle_partial_options)
        layout.addWidget(self.btn_partial_deletion)

        # Opções de exclusão parcial
        self.partial_options = QGroupBox("Dados a excluir")
        options_layout = QVBoxLayout(self.partial_options)
        self.checkboxes: Dict[DataCategory, QCheckBox] = {}
        for category in DataCategory:
            cb = QCheckBox(CATEGORY_LABELS[category])
            options_layout.addWidget(cb)
            self.checkboxes[category] = cb
        self.btn_confirm_partial = QPushButton("Excluir dados selecionados")
        self.btn_confirm_partial.clicked.connect(self._on_confirm_partial)
        options_layout.addWidget(self.btn_confirm_partial)
        self.partial_options.setVisible(False)
        layout.addWidget(self.partial_options)

        self.lbl_status = QLabel("")
        self.lbl_status.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.lbl_status)

        btns = QHBoxLayout()
        btns.addStretch()
        self.btn_close = QPushButton("Fechar")
        self.btn_close.clicked.connect(self.reject)
        btns.addWidget(self.btn_close)
        layout.addLayout(btns)

    # -----------------------------------------------------------------

    def selected_data_types(self) -> List[str]:
        return [category.value for category, cb in self.checkboxes.items() if cb.isChecked()]

    def clear_selection(self):
        for cb in self.checkboxes.values():
            cb.setChecked(False)
        self.partial_options.setVisible(False)

    def _toggle_partial_options(self):
        self.partial_options.setVisible(not self.partial_options.isVisible())

    def _set_busy(self, busy: bool):
        for btn in (self.btn_delete_account, self.btn_partial_deletion,
                    self.btn_confirm_partial, self.btn_close):
            btn.setEnabled(not busy)
        self.lbl_status.setText("Processando solicitação..." if busy else "")

    def _on_delete_account(self):
        confirmed = CustomMessageBox.confirm(
            self, "Excluir Conta",
            "Tem certeza que deseja excluir sua conta? Esta ação não pode ser desfeita "
            "e todos os seus dados serão removidos permanentemente.",
            "Sim, excluir minha conta", qss=current_popup_qss()
        )
        if confirmed:
            self._start("complete")

    def _on_confirm_partial(self):
        data_types = self.selected_data_types()
        if not data_types:
            CustomMessageBox.show_message(self, "Exclusão Parcial de Dados", MSG_EMPTY_SELECTION,
                                          qss=current_popup_qss())
            return
        confirmed = CustomMessageBox.confirm(
            self, "Exclusão Parcial de Dados",
            "Tem certeza que deseja excluir os dados selecionados? Esta ação não pode ser desfeita.",
            "Sim, excluir dados selecionados", qss=current_popup_qss()
        )
        if confirmed:
            self._start(data_types)

    def _start(self, scope):
        if self.worker is not None and self.worker.isRunning():
            return
        self._complete_requested = scope == "complete"
        self._set_busy(True)
        self.worker = DeletionThread(self.orchestrator, self.user.user_id, scope,
                                     self.reason.text().strip() or None)
        self.worker.completed.connect(self._on_finished)
        self.worker.start()

    def _on_finished(self, ok: bool, message: str):
        self._set_busy(False)
        if not ok:
            log_warning(f"Exclusão não concluída para o usuário {self.user.user_id}: {message}")
            CustomMessageBox.show_message(self, "Erro", MSG_FAILURE, qss=current_popup_qss())
            return

        log_event(f"Exclusão concluída pela interface: {message}")
        if self._complete_requested:
            CustomMessageBox.show_message(
                self, "Conta Excluída",
                "Sua conta e todos os seus dados foram excluídos. Você será levado à tela de login.",
                qss=current_popup_qss()
            )
            self.account_deleted.emit()
            self.accept()
        else:
            CustomMessageBox.show_message(self, "Dados Excluídos", message, qss=current_popup_qss())
            self.clear_selection()
            self.lbl_pending.setVisible(self.orchestrator.ledger.has_pending_request(self.user.user_id))
