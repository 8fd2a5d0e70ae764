# session.py
# Sessão do usuário logado (login, logout, verificação)

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from core.exceptions import AuthRequired
from core.logger import log_event, log_warning


@dataclass
class SessionUser:
    user_id: int
    name: Optional[str]
    email: Optional[str]


def default_session_file() -> Path:
    """~/.acucaradas/session.json"""
    config_dir = Path.home() / ".acucaradas"
    config_dir.mkdir(exist_ok=True)
    return config_dir / "session.json"


class SessionContext:
    """
    Contexto de sessão explícito, passado a quem precisa dele.

    Só responde "quem está logado". O que fazer quando ninguém está
    (voltar ao login, mostrar aviso) é decisão da interface.
    """

    def __init__(self, storage_path: Optional[os.PathLike] = None):
        self.storage_path = Path(storage_path) if storage_path else default_session_file()
        self._user: Optional[SessionUser] = None
        self._load()

    def _load(self):
        if not self.storage_path.exists():
            return
        try:
            with open(self.storage_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self._user = SessionUser(
                user_id=int(data['user_id']),
                name=data.get('name'),
                email=data.get('email'),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            log_warning(f"Sessão salva ilegível, ignorando: {e}")
            self._user = None

    def create_login_session(self, user_id: int, name: Optional[str], email: Optional[str]) -> SessionUser:
        self._user = SessionUser(user_id=int(user_id), name=name, email=email)
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.storage_path, 'w', encoding='utf-8') as f:
            json.dump(asdict(self._user), f)
        log_event(f"🔐 Sessão iniciada para o usuário {user_id}")
        return self._user

    def is_logged_in(self) -> bool:
        return self._user is not None

    def current_user(self) -> Optional[SessionUser]:
        return self._user

    def require_authenticated(self) -> SessionUser:
        if self._user is None:
            raise AuthRequired()
        return self._user

    def invalidate(self):
        """Limpa os dados da sessão (memória e arquivo)"""
        user_id = self._user.user_id if self._user else None
        self._user = None
        if self.storage_path.exists():
            self.storage_path.unlink()
        log_event(f"🔒 Sessão encerrada (usuário {user_id})")
