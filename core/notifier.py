# notifier.py
"""
Aviso remoto de solicitações de exclusão
Envia um POST (melhor esforço) para a API do servidor. O resultado não
desfaz nem condiciona a exclusão local.
"""

import json
import socket
import time
import urllib.error
import urllib.request
from typing import Iterable, Optional, Tuple

from core.logger import log_event, log_warning
from core.models import DeletionType

MSG_SENT = "Solicitação enviada ao servidor"
MSG_PROCESSING_ERROR = "Erro ao processar solicitação. Tente novamente."
MSG_CONNECTION_ERROR = "Falha na conexão. Verifique sua internet e tente novamente."

ENDPOINTS = {
    DeletionType.COMPLETE: "account-deletion",
    DeletionType.PARTIAL: "data-deletion",
}


def build_payload(user_id: int, deletion_type: DeletionType,
                  data_types: Optional[Iterable[str]] = None,
                  reason: Optional[str] = None,
                  request_date: Optional[int] = None) -> dict:
    """Monta o corpo JSON: userId, deletionType, requestDate (ms), dataTypes?, reason?"""
    payload = {
        "userId": user_id,
        "deletionType": DeletionType(deletion_type).value,
        "requestDate": request_date if request_date is not None else int(time.time() * 1000),
    }
    if data_types:
        payload["dataTypes"] = [str(t) for t in data_types]
    if reason:
        payload["reason"] = reason
    return payload


class DeletionNotifier:
    """Cliente HTTP do aviso remoto (sem novas tentativas)"""

    def __init__(self, api_base_url: str, timeout: float = 10.0, token: Optional[str] = None):
        self.api_base_url = api_base_url.rstrip('/')
        self.timeout = timeout
        self.token = token

    def url_for(self, deletion_type: DeletionType) -> str:
        return f"{self.api_base_url}/{ENDPOINTS[DeletionType(deletion_type)]}"

    def notify(self, user_id: int, deletion_type: DeletionType,
               data_types: Optional[Iterable[str]] = None,
               reason: Optional[str] = None) -> Tuple[bool, str]:
        """
        Envia o aviso.

        Returns:
            Tuple[bool, str]: (sucesso, mensagem para o usuário)
        """
        payload = build_payload(user_id, deletion_type, data_types, reason)
        headers = {'Content-Type': 'application/json; charset=utf-8'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'

        req = urllib.request.Request(
            self.url_for(deletion_type),
            data=json.dumps(payload).encode('utf-8'),
            headers=headers,
            method='POST'
        )

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                if 200 <= response.status < 300:
                    log_event(f"📨 Aviso de exclusão enviado: usuário {user_id}, tipo {payload['deletionType']}")
                    return True, MSG_SENT
                log_warning(f"Aviso de exclusão recusado: HTTP {response.status}")
                return False, MSG_PROCESSING_ERROR

        except urllib.error.HTTPError as e:
            log_warning(f"Aviso de exclusão recusado: HTTP {e.code}")
            return False, MSG_PROCESSING_ERROR

        except (urllib.error.URLError, socket.timeout, ConnectionError) as e:
            log_warning(f"Sem conexão para enviar aviso de exclusão: {e}")
            return False, MSG_CONNECTION_ERROR


def notifier_from_settings(settings: dict) -> Optional[DeletionNotifier]:
    """Cria o cliente a partir de config.get_notification_settings(); None se desativado"""
    base_url = settings.get('api_base_url')
    if not base_url:
        return None
    return DeletionNotifier(base_url, timeout=settings.get('timeout', 10.0), token=settings.get('token'))
