# orchestrator.py
"""
Orquestração das solicitações de exclusão
=========================================
Recebe o pedido da interface (ou da API local), registra a solicitação,
executa a exclusão em cascata num worker serial e entrega exatamente um
resultado por solicitação, como um Future.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Mapping, Optional, Union

from core.database import Database
from core.engine import CascadeDeletionEngine
from core.exceptions import LedgerWriteFailure
from core.ledger import DeletionLedger
from core.logger import log_error, log_event
from core.models import DataCategory, DeletionOutcome, DeletionType
from core.notifier import DeletionNotifier
from core.session import SessionContext

MSG_ACCOUNT_DELETED = "Conta excluída com sucesso"
MSG_ACCOUNT_FAILED = "Falha ao excluir a conta"
MSG_DATA_DELETED = "Dados excluídos com sucesso"
MSG_DATA_FAILED = "Falha ao excluir os dados"
MSG_REGISTER_FAILED = "Falha ao registrar solicitação de exclusão"
MSG_EMPTY_SELECTION = "Selecione pelo menos um tipo de dado para excluir"
MSG_INVALID_SCOPE = "Tipo de exclusão inválido"
MSG_UNAVAILABLE = "Serviço de exclusão indisponível"

ResultCallback = Callable[[bool, str], None]
Scope = Union[str, DeletionType, Iterable[Union[str, DataCategory]]]


def _tag_values(data_types: Iterable[Union[str, DataCategory]]) -> List[str]:
    return [t.value if isinstance(t, DataCategory) else str(t) for t in data_types]


def _is_collection(value) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping))


class DeletionOrchestrator:
    """
    Fronteira assíncrona entre quem pede a exclusão e o motor.

    As solicitações são processadas uma por vez, na ordem de envio. Nenhuma
    exceção escapa daqui: tudo vira um DeletionOutcome de sucesso ou falha.
    """

    def __init__(self, db: Database, session: Optional[SessionContext] = None,
                 notifier: Optional[DeletionNotifier] = None,
                 ledger: Optional[DeletionLedger] = None,
                 engine: Optional[CascadeDeletionEngine] = None):
        self.db = db
        self.ledger = ledger or DeletionLedger(db)
        self.engine = engine or CascadeDeletionEngine(db, self.ledger)
        self.session = session
        self.notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="exclusao")

    # -----------------------------------------------------------------
    # Processamento síncrono (roda no worker)
    # -----------------------------------------------------------------

    def process_complete_deletion(self, user_id: int, reason: Optional[str] = None) -> DeletionOutcome:
        try:
            try:
                request_id = self.ledger.log_complete_deletion_request(user_id, reason)
            except LedgerWriteFailure:
                return DeletionOutcome(False, MSG_REGISTER_FAILED, DeletionType.COMPLETE)

            if self.engine.execute_complete_deletion(user_id):
                invalidated = self._invalidate_session(user_id)
                outcome = DeletionOutcome(True, MSG_ACCOUNT_DELETED, DeletionType.COMPLETE,
                                          request_id=request_id, session_invalidated=invalidated)
            else:
                outcome = DeletionOutcome(False, MSG_ACCOUNT_FAILED, DeletionType.COMPLETE,
                                          request_id=request_id)
        except Exception as e:
            log_error(f"Erro inesperado na exclusão completa do usuário {user_id}", e)
            return DeletionOutcome(False, f"Erro: {e}", DeletionType.COMPLETE)

        outcome.remote_message = self._notify(user_id, DeletionType.COMPLETE, None, reason)
        return outcome

    def process_partial_deletion(self, user_id: int,
                                 data_types: Iterable[Union[str, DataCategory]],
                                 reason: Optional[str] = None) -> DeletionOutcome:
        try:
            tags = _tag_values(data_types)
            try:
                request_id = self.ledger.log_partial_deletion_request(user_id, tags, reason)
            except LedgerWriteFailure:
                return DeletionOutcome(False, MSG_REGISTER_FAILED, DeletionType.PARTIAL, data_types=tags)

            ok = self.engine.execute_partial_deletion(user_id, tags)
            outcome = DeletionOutcome(ok, MSG_DATA_DELETED if ok else MSG_DATA_FAILED,
                                      DeletionType.PARTIAL, request_id=request_id, data_types=tags)
        except Exception as e:
            log_error(f"Erro inesperado na exclusão parcial do usuário {user_id}", e)
            return DeletionOutcome(False, f"Erro: {e}", DeletionType.PARTIAL)

        outcome.remote_message = self._notify(user_id, DeletionType.PARTIAL, tags, reason)
        return outcome

    def _invalidate_session(self, user_id: int) -> bool:
        """Encerra a sessão só se ela pertence à conta excluída"""
        if self.session is None:
            return False
        current = self.session.current_user()
        if current is None or current.user_id != user_id:
            return False
        try:
            self.session.invalidate()
        except OSError as e:
            # A conta já foi excluída; falha aqui não muda o resultado
            log_error(f"Erro ao encerrar a sessão do usuário {user_id}", e)
        return not self.session.is_logged_in()

    def _notify(self, user_id: int, deletion_type: DeletionType,
                data_types: Optional[List[str]], reason: Optional[str]) -> Optional[str]:
        if self.notifier is None:
            return None
        try:
            _, message = self.notifier.notify(user_id, deletion_type, data_types, reason)
            return message
        except Exception as e:
            log_error("Erro ao enviar aviso remoto de exclusão", e)
            return None

    # -----------------------------------------------------------------
    # Fronteira assíncrona
    # -----------------------------------------------------------------

    def request_complete_deletion(self, user_id: int, reason: Optional[str] = None,
                                  on_result: Optional[ResultCallback] = None) -> "Future[DeletionOutcome]":
        log_event(f"➡️ Exclusão completa solicitada pelo usuário {user_id}")
        return self._submit(DeletionType.COMPLETE, on_result,
                            self.process_complete_deletion, user_id, reason)

    def request_partial_deletion(self, user_id: int,
                                 data_types: Iterable[Union[str, DataCategory]],
                                 reason: Optional[str] = None,
                                 on_result: Optional[ResultCallback] = None) -> "Future[DeletionOutcome]":
        if not _is_collection(data_types):
            return self._completed(DeletionOutcome(False, MSG_INVALID_SCOPE, DeletionType.PARTIAL), on_result)
        tags = _tag_values(data_types)
        log_event(f"➡️ Exclusão parcial solicitada pelo usuário {user_id}: {', '.join(tags)}")
        return self._submit(DeletionType.PARTIAL, on_result,
                            self.process_partial_deletion, user_id, tags, reason)

    def initiate(self, user_id: int, scope: Scope, reason: Optional[str] = None,
                 on_result: Optional[ResultCallback] = None) -> "Future[DeletionOutcome]":
        """Ponto de entrada único: scope é "complete" ou uma coleção de categorias"""
        if isinstance(scope, str):
            if scope.strip().lower() == DeletionType.COMPLETE.value:
                return self.request_complete_deletion(user_id, reason, on_result)
            return self._completed(DeletionOutcome(False, MSG_INVALID_SCOPE, DeletionType.PARTIAL), on_result)

        if not _is_collection(scope):
            return self._completed(DeletionOutcome(False, MSG_INVALID_SCOPE, DeletionType.PARTIAL), on_result)
        tags = _tag_values(scope)
        if not tags:
            return self._completed(DeletionOutcome(False, MSG_EMPTY_SELECTION, DeletionType.PARTIAL), on_result)
        return self.request_partial_deletion(user_id, tags, reason, on_result)

    def _submit(self, deletion_type: DeletionType, on_result: Optional[ResultCallback],
                fn, *args) -> "Future[DeletionOutcome]":
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError as e:
            log_error("Worker de exclusão encerrado", e)
            return self._completed(DeletionOutcome(False, MSG_UNAVAILABLE, deletion_type), on_result)
        if on_result is not None:
            future.add_done_callback(lambda f: self._deliver(f, on_result))
        return future

    def _completed(self, outcome: DeletionOutcome,
                   on_result: Optional[ResultCallback]) -> "Future[DeletionOutcome]":
        future: "Future[DeletionOutcome]" = Future()
        future.set_result(outcome)
        if on_result is not None:
            self._deliver(future, on_result)
        return future

    def _deliver(self, future: "Future[DeletionOutcome]", on_result: ResultCallback):
        outcome = future.result()
        try:
            on_result(outcome.ok, outcome.message)
        except Exception as e:
            log_error("Erro no callback de resultado da exclusão", e)

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()
        return False
