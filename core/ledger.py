# ledger.py
# Registro (auditoria) das solicitações de exclusão

import sqlite3
from typing import Iterable, List, Optional, Union

from core.database import Database, now_str
from core.exceptions import LedgerWriteFailure
from core.logger import log_event, log_error, log_warning
from core.models import DataCategory, DeletionRequest, DeletionType, RequestStatus


def serialize_data_types(data_types: Iterable[Union[str, DataCategory]]) -> str:
    """Lista ordenada de etiquetas separadas por vírgula (ordem da solicitação)"""
    tags = []
    for tag in data_types:
        value = tag.value if isinstance(tag, DataCategory) else str(tag).strip()
        if value:
            tags.append(value)
    return ",".join(tags)


class DeletionLedger:
    """
    Guarda o ciclo de vida das solicitações (pending -> completed).

    O registro nunca é apagado, nem quando o usuário é excluído. A unicidade de
    solicitações pendentes não é imposta aqui: quem chama deve consultar
    has_pending_request antes de registrar.
    """

    def __init__(self, db: Database):
        self.db = db

    def _insert(self, user_id: int, deletion_type: DeletionType,
                data_types: Optional[str], reason: Optional[str]) -> int:
        try:
            cur = self.db.execute(
                "INSERT INTO deletion_requests(user_id, type, data_types, reason, status, requested_at) "
                "VALUES (?,?,?,?,?,?)",
                (user_id, deletion_type.value, data_types, reason, RequestStatus.PENDING.value, now_str())
            )
        except sqlite3.Error as e:
            log_error(f"Erro ao registrar solicitação de exclusão ({deletion_type.value}) do usuário {user_id}", e)
            raise LedgerWriteFailure(user_id) from e

        request_id = cur.lastrowid or 0
        if request_id <= 0:
            raise LedgerWriteFailure(user_id)
        log_event(f"📝 Solicitação de exclusão #{request_id} registrada: usuário {user_id}, tipo {deletion_type.value}")
        return request_id

    def log_complete_deletion_request(self, user_id: int, reason: Optional[str] = None) -> int:
        """Registra uma solicitação de exclusão completa (status pending)"""
        return self._insert(user_id, DeletionType.COMPLETE, None, reason)

    def log_partial_deletion_request(self, user_id: int,
                                     data_types: Iterable[Union[str, DataCategory]],
                                     reason: Optional[str] = None) -> int:
        """Registra uma solicitação de exclusão parcial com as categorias pedidas"""
        return self._insert(user_id, DeletionType.PARTIAL, serialize_data_types(data_types), reason)

    def mark_request_completed(self, user_id: int, deletion_type: DeletionType,
                               cursor: Optional[sqlite3.Cursor] = None) -> int:
        """
        Marca como concluídas as solicitações pendentes de (user_id, tipo).

        Com cursor, a atualização entra na transação aberta pelo chamador.
        Todas as linhas pendentes correspondentes são concluídas.

        Returns:
            int: número de solicitações que passaram para completed
        """
        sql = ("UPDATE deletion_requests SET status=?, processed_at=? "
               "WHERE user_id=? AND type=? AND status=?")
        params = (RequestStatus.COMPLETED.value, now_str(), user_id,
                  DeletionType(deletion_type).value, RequestStatus.PENDING.value)
        if cursor is not None:
            cursor.execute(sql, params)
            updated = cursor.rowcount
        else:
            updated = self.db.execute(sql, params).rowcount

        if updated > 1:
            log_warning(f"⚠️ {updated} solicitações pendentes ({DeletionType(deletion_type).value}) "
                        f"do usuário {user_id} concluídas de uma vez")
        return updated

    def has_pending_request(self, user_id: int) -> bool:
        """Verifica se existe uma solicitação pendente para o usuário"""
        rows = self.db.query(
            "SELECT 1 FROM deletion_requests WHERE user_id=? AND status=? LIMIT 1",
            (user_id, RequestStatus.PENDING.value)
        )
        return bool(rows)

    def get_request(self, request_id: int) -> Optional[DeletionRequest]:
        rows = self.db.query("SELECT * FROM deletion_requests WHERE id=?", (request_id,))
        return DeletionRequest.from_row(rows[0]) if rows else None

    def list_requests(self, user_id: int,
                      status: Optional[Union[str, RequestStatus]] = None) -> List[DeletionRequest]:
        """Solicitações do usuário, mais recentes primeiro (consulta de auditoria)"""
        if status is None:
            rows = self.db.query(
                "SELECT * FROM deletion_requests WHERE user_id=? ORDER BY id DESC",
                (user_id,)
            )
        else:
            rows = self.db.query(
                "SELECT * FROM deletion_requests WHERE user_id=? AND status=? ORDER BY id DESC",
                (user_id, RequestStatus(status).value)
            )
        return [DeletionRequest.from_row(r) for r in rows]
