# database.py
# Responsável pela conexão e operações com o banco de dados SQLite

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Tuple, Union, Mapping

# Parameter type accepted by sqlite3 (positional tuple or named mapping)
Params = Union[Tuple[Any, ...], Mapping[str, Any]]

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        email TEXT UNIQUE,
        password TEXT,
        phone TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS addresses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        street TEXT,
        number TEXT,
        complement TEXT,
        neighborhood TEXT,
        city TEXT,
        state TEXT,
        zipcode TEXT,
        is_default INTEGER DEFAULT 0,
        FOREIGN KEY(user_id) REFERENCES users(id)
    )
    """,
    # address_id vira NULL quando o endereço é excluído parcialmente
    """
    CREATE TABLE IF NOT EXISTS orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        address_id INTEGER,
        total REAL,
        status TEXT,
        payment_method TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY(user_id) REFERENCES users(id),
        FOREIGN KEY(address_id) REFERENCES addresses(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id INTEGER,
        product_id INTEGER,
        quantity INTEGER,
        price REAL,
        FOREIGN KEY(order_id) REFERENCES orders(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_preferences (
        user_id INTEGER PRIMARY KEY,
        notifications_enabled INTEGER DEFAULT 1,
        theme TEXT DEFAULT 'light',
        language TEXT DEFAULT 'pt_BR',
        FOREIGN KEY(user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS payment_methods (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        type TEXT,
        card_number TEXT,
        card_holder TEXT,
        expiry_date TEXT,
        is_default INTEGER DEFAULT 0,
        FOREIGN KEY(user_id) REFERENCES users(id)
    )
    """,
    # Sem FOREIGN KEY em user_id: o registro de auditoria sobrevive ao usuário
    """
    CREATE TABLE IF NOT EXISTS deletion_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('complete','partial')),
        data_types TEXT,
        reason TEXT,
        status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending','completed')),
        requested_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        processed_at DATETIME
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_addresses_user ON addresses(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_orders_user ON orders(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id)",
    "CREATE INDEX IF NOT EXISTS idx_payment_methods_user ON payment_methods(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_deletion_requests_user_status ON deletion_requests(user_id, status)",
)


def now_str() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class Database:
    def __init__(self, db_path: str):
        self.db_path = db_path
        # check_same_thread=False: o worker de exclusão usa a mesma conexão
        # timeout define quanto esperar em locks antes de falhar
        self.conn = sqlite3.connect(self.db_path, timeout=10, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        # Serializa o uso da conexão entre a thread da UI e o worker
        self._lock = threading.RLock()
        # PRAGMAs para melhorar concorrência e integridade
        c = self.conn.cursor()
        c.execute("PRAGMA foreign_keys=ON")
        c.execute("PRAGMA journal_mode=WAL")  # leitores não bloqueiam escritor
        c.execute("PRAGMA synchronous=NORMAL")
        c.execute("PRAGMA busy_timeout=5000")  # 5s de espera em lock
        c.execute("PRAGMA temp_store=MEMORY")
        self.conn.commit()
        self._init_db()

    def _init_db(self):
        with self._lock:
            cur = self.conn.cursor()
            for statement in SCHEMA:
                cur.execute(statement)
            self.conn.commit()

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        with self._lock:
            cur = self.conn.cursor()
            try:
                cur.execute(sql, params)
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
            return cur

    def query(self, sql: str, params: Params = ()) -> List[sqlite3.Row]:
        with self._lock:
            cur = self.conn.cursor()
            try:
                cur.execute(sql, params)
                return cur.fetchall()
            except sqlite3.DatabaseError as e:
                if "malformed" in str(e).lower() or "corrupt" in str(e).lower():
                    raise sqlite3.DatabaseError(f"Banco de dados corrompido: {e}")
                raise

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Abre uma transação atômica (BEGIN IMMEDIATE) e entrega o cursor.
        Commit ao sair normalmente; rollback completo em qualquer exceção.
        """
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("BEGIN IMMEDIATE")
            try:
                yield cur
            except BaseException:
                self.conn.rollback()
                raise
            else:
                self.conn.commit()

    def count(self, table: str, where: str = "", params: Params = ()) -> int:
        """Conta linhas de uma tabela (usado em relatórios e testes)"""
        sql = f"SELECT COUNT(*) AS c FROM {table}"
        if where:
            sql += f" WHERE {where}"
        return int(self.query(sql, params)[0]["c"])

    def verify_integrity(self) -> Tuple[bool, str]:
        """Verifica a integridade do banco e das chaves estrangeiras"""
        try:
            result = self.query("PRAGMA integrity_check")
            if not result or result[0][0] != "ok":
                return False, f"Problemas detectados: {result[0][0] if result else 'desconhecido'}"
            orphans = self.query("PRAGMA foreign_key_check")
            if orphans:
                return False, f"{len(orphans)} referência(s) órfã(s) encontrada(s)"
            return True, "Banco de dados íntegro"
        except sqlite3.Error as e:
            return False, f"Erro ao verificar: {str(e)}"

    def close(self):
        with self._lock:
            self.conn.close()
