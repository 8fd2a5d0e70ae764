# engine.py
# Exclusão em cascata: conta completa ou categorias de dados

import sqlite3
from typing import Iterable, List, Union

from core.database import Database
from core.exceptions import TransactionFailure
from core.ledger import DeletionLedger
from core.logger import log_debug, log_error, log_event, log_warning
from core.models import DEFAULT_LANGUAGE, DEFAULT_THEME, DataCategory, DeletionType


class CascadeDeletionEngine:
    """
    Executa a exclusão dentro de uma única transação, na ordem das dependências:
    itens de pedido antes dos pedidos, dependentes antes do usuário.

    Qualquer erro desfaz tudo, inclusive a baixa da solicitação no registro.
    """

    def __init__(self, db: Database, ledger: DeletionLedger):
        self.db = db
        self.ledger = ledger

    # -----------------------------------------------------------------
    # Passos individuais (sempre dentro da transação do chamador)
    # -----------------------------------------------------------------

    def _delete_preferences(self, cur: sqlite3.Cursor, user_id: int) -> int:
        cur.execute("DELETE FROM user_preferences WHERE user_id=?", (user_id,))
        return cur.rowcount

    def _reset_preferences(self, cur: sqlite3.Cursor, user_id: int) -> int:
        # Reseta, não exclui: a linha de preferências continua existindo
        cur.execute(
            "UPDATE user_preferences SET notifications_enabled=?, theme=?, language=? WHERE user_id=?",
            (1, DEFAULT_THEME, DEFAULT_LANGUAGE, user_id)
        )
        return cur.rowcount

    def _delete_payment_methods(self, cur: sqlite3.Cursor, user_id: int) -> int:
        cur.execute("DELETE FROM payment_methods WHERE user_id=?", (user_id,))
        return cur.rowcount

    def _delete_orders(self, cur: sqlite3.Cursor, user_id: int) -> int:
        order_ids = [row[0] for row in cur.execute(
            "SELECT id FROM orders WHERE user_id=?", (user_id,)
        ).fetchall()]
        items = 0
        for order_id in order_ids:
            cur.execute("DELETE FROM order_items WHERE order_id=?", (order_id,))
            items += cur.rowcount
            cur.execute("DELETE FROM orders WHERE id=?", (order_id,))
        log_debug(f"Usuário {user_id}: {items} item(ns) de {len(order_ids)} pedido(s) excluídos")
        return len(order_ids)

    def _delete_addresses(self, cur: sqlite3.Cursor, user_id: int) -> int:
        cur.execute("DELETE FROM addresses WHERE user_id=?", (user_id,))
        return cur.rowcount

    def _delete_user(self, cur: sqlite3.Cursor, user_id: int) -> int:
        cur.execute("DELETE FROM users WHERE id=?", (user_id,))
        return cur.rowcount

    def _apply_category(self, cur: sqlite3.Cursor, user_id: int, category: DataCategory) -> int:
        if category is DataCategory.ORDERS:
            return self._delete_orders(cur, user_id)
        elif category is DataCategory.ADDRESSES:
            return self._delete_addresses(cur, user_id)
        elif category is DataCategory.PAYMENT:
            return self._delete_payment_methods(cur, user_id)
        elif category is DataCategory.PREFERENCES:
            return self._reset_preferences(cur, user_id)
        raise ValueError(f"Categoria sem tratamento: {category!r}")

    # -----------------------------------------------------------------
    # Operações estritas (levantam TransactionFailure)
    # -----------------------------------------------------------------

    def complete_deletion(self, user_id: int) -> None:
        """Exclui a conta e todos os dependentes; levanta TransactionFailure em erro"""
        try:
            with self.db.transaction() as cur:
                prefs = self._delete_preferences(cur, user_id)
                payments = self._delete_payment_methods(cur, user_id)
                orders = self._delete_orders(cur, user_id)
                addresses = self._delete_addresses(cur, user_id)
                requests = self.ledger.mark_request_completed(user_id, DeletionType.COMPLETE, cursor=cur)
                users = self._delete_user(cur, user_id)
                log_debug(f"Usuário {user_id}: preferências={prefs}, pagamentos={payments}, "
                          f"pedidos={orders}, endereços={addresses}, solicitações={requests}, conta={users}")
        except Exception as e:
            raise TransactionFailure(f"Exclusão completa do usuário {user_id} desfeita: {e}") from e

    def partial_deletion(self, user_id: int,
                         data_types: Iterable[Union[str, DataCategory]]) -> List[DataCategory]:
        """
        Exclui (ou reseta) as categorias pedidas, na ordem recebida.
        Etiquetas desconhecidas são ignoradas com aviso no log.

        Returns:
            List[DataCategory]: categorias efetivamente processadas
        """
        processed: List[DataCategory] = []
        try:
            with self.db.transaction() as cur:
                for tag in data_types:
                    category = DataCategory.parse(tag)
                    if category is None:
                        log_warning(f"Categoria de dados não reconhecida ignorada: {tag!r} (usuário {user_id})")
                        continue
                    affected = self._apply_category(cur, user_id, category)
                    log_debug(f"Usuário {user_id}: categoria {category.value} -> {affected} linha(s)")
                    processed.append(category)
                self.ledger.mark_request_completed(user_id, DeletionType.PARTIAL, cursor=cur)
        except Exception as e:
            raise TransactionFailure(f"Exclusão parcial do usuário {user_id} desfeita: {e}") from e
        return processed

    # -----------------------------------------------------------------
    # Contrato público: sucesso/falha
    # -----------------------------------------------------------------

    def execute_complete_deletion(self, user_id: int) -> bool:
        try:
            self.complete_deletion(user_id)
        except TransactionFailure as e:
            log_error(f"❌ Falha na exclusão completa da conta {user_id}", e.__cause__ or e)
            return False
        log_event(f"🗑️ Conta {user_id} excluída por completo")
        return True

    def execute_partial_deletion(self, user_id: int,
                                 data_types: Iterable[Union[str, DataCategory]]) -> bool:
        try:
            processed = self.partial_deletion(user_id, list(data_types))
        except TransactionFailure as e:
            log_error(f"❌ Falha na exclusão parcial de dados do usuário {user_id}", e.__cause__ or e)
            return False
        log_event(f"🗑️ Dados do usuário {user_id} excluídos: {', '.join(c.value for c in processed) or 'nenhuma categoria'}")
        return True
