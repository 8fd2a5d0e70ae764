# services.py
# Camada de serviços para regras de negócio

import sqlite3
from typing import Optional

import bcrypt

from core.database import Database, now_str
from core.logger import log_error, log_event
from core.models import DEFAULT_LANGUAGE, DEFAULT_THEME, User


def hash_password(password: str) -> str:
    """Retorna o hash bcrypt da senha."""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, stored_hash: str) -> bool:
    """Verifica se a senha corresponde ao hash bcrypt armazenado."""
    if not password or not stored_hash or not stored_hash.startswith('$2'):
        return False
    return bcrypt.checkpw(password.encode('utf-8'), stored_hash.encode('utf-8'))


def _user_from_row(row) -> User:
    return User(id=row["id"], name=row["name"], email=row["email"],
                password=row["password"], phone=row["phone"], created_at=row["created_at"])


class AuthService:
    def __init__(self, db: Database):
        self.db = db

    def authenticate(self, email: str, password: str) -> Optional[User]:
        rows = self.db.query("SELECT * FROM users WHERE email=?", (email.strip().lower(),))
        if not rows:
            return None
        user = rows[0]
        if not verify_password(password, user["password"] or ""):
            return None
        return _user_from_row(user)

    def create_user(self, name: str, email: str, password: str, phone: Optional[str] = None) -> int:
        """Cria o usuário e sua linha de preferências padrão, na mesma transação."""
        try:
            with self.db.transaction() as cur:
                cur.execute(
                    "INSERT INTO users(name, email, password, phone, created_at) VALUES (?,?,?,?,?)",
                    (name, email.strip().lower(), hash_password(password), phone, now_str())
                )
                user_id = cur.lastrowid
                cur.execute(
                    "INSERT INTO user_preferences(user_id, notifications_enabled, theme, language) VALUES (?,?,?,?)",
                    (user_id, 1, DEFAULT_THEME, DEFAULT_LANGUAGE)
                )
        except sqlite3.IntegrityError as e:
            log_error(f"Erro ao criar usuário {email}", e)
            raise
        log_event(f"👤 Usuário {user_id} criado")
        return user_id

    def get_user(self, user_id: int) -> Optional[User]:
        rows = self.db.query("SELECT * FROM users WHERE id=?", (user_id,))
        return _user_from_row(rows[0]) if rows else None
