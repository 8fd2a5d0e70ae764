"""
Servidor Web Flask para solicitações de exclusão
================================================
Permite pedir a exclusão da conta (ou de dados) e consultar o histórico de
solicitações via rede local.
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
from concurrent.futures import TimeoutError as FutureTimeout
import socket
import threading
from typing import Optional

from core.exceptions import AuthRequired
from core.logger import log_error, log_event
from core.models import RequestStatus
from core.orchestrator import DeletionOrchestrator
from core.session import SessionContext

# Tempo máximo de espera pelo worker de exclusão numa requisição HTTP
REQUEST_TIMEOUT = 60

MSG_GENERIC_FAILURE = "Falha ao processar a solicitação. Tente novamente."


class WebServer:
    """Servidor web Flask da API de exclusão"""

    def __init__(self, orchestrator: DeletionOrchestrator, session: SessionContext,
                 host: str = '0.0.0.0', port: int = 5000):
        """
        Inicializa o servidor web

        Args:
            orchestrator: orquestrador que processa as solicitações
            session: sessão do usuário logado neste aparelho
            host: interface de escuta
            port: Porta para o servidor (padrão: 5000)
        """
        self.orchestrator = orchestrator
        self.ledger = orchestrator.ledger
        self.session = session
        self.host = host
        self.port = port
        self.app = Flask(__name__)
        CORS(self.app)  # Permite requisições de qualquer origem

        # Configurar rotas
        self._setup_routes()

    def _authorize(self, user_id: int):
        """Retorna (resposta, status) de erro ou None se o usuário logado é o dono da conta

        Vale também para as consultas: o histórico inclui o motivo informado pelo usuário.
        """
        try:
            current = self.session.require_authenticated()
        except AuthRequired as e:
            return jsonify({'success': False, 'error': e.message}), 401
        if current.user_id != user_id:
            return jsonify({'success': False, 'error': 'Operação não permitida para este usuário'}), 403
        return None

    def _read_user_id(self, data: dict) -> Optional[int]:
        try:
            return int(data.get('user_id'))
        except (TypeError, ValueError):
            return None

    def _outcome_response(self, future):
        try:
            outcome = future.result(timeout=REQUEST_TIMEOUT)
        except FutureTimeout:
            # A exclusão continua no worker; o resultado fica no histórico
            return jsonify({'success': False, 'error': 'Solicitação em processamento'}), 202
        body = {
            'success': outcome.ok,
            'message': outcome.message if outcome.ok else MSG_GENERIC_FAILURE,
            'request_id': outcome.request_id,
            'session_invalidated': outcome.session_invalidated,
        }
        if outcome.remote_message:
            body['remote_message'] = outcome.remote_message
        return jsonify(body), (200 if outcome.ok else 500)

    def _setup_routes(self):
        """Configura as rotas da API"""

        # API: Excluir conta completa
        @self.app.route('/api/account-deletion', methods=['POST'])
        def request_account_deletion():
            """Exclui a conta do usuário logado e todos os seus dados"""
            data = request.get_json(silent=True) or {}
            user_id = self._read_user_id(data)
            if user_id is None:
                return jsonify({'success': False, 'error': 'Campo "user_id" é obrigatório'}), 400

            denied = self._authorize(user_id)
            if denied:
                return denied

            future = self.orchestrator.request_complete_deletion(user_id, data.get('reason'))
            return self._outcome_response(future)

        # API: Excluir categorias de dados
        @self.app.route('/api/data-deletion', methods=['POST'])
        def request_data_deletion():
            """Exclui as categorias de dados escolhidas, mantendo a conta"""
            data = request.get_json(silent=True) or {}
            user_id = self._read_user_id(data)
            if user_id is None:
                return jsonify({'success': False, 'error': 'Campo "user_id" é obrigatório'}), 400

            data_types = data.get('data_types')
            if not isinstance(data_types, list) or not data_types:
                return jsonify({
                    'success': False,
                    'error': 'Selecione pelo menos um tipo de dado para excluir'
                }), 400

            denied = self._authorize(user_id)
            if denied:
                return denied

            future = self.orchestrator.request_partial_deletion(
                user_id, [str(t) for t in data_types], data.get('reason')
            )
            return self._outcome_response(future)

        # API: Histórico de solicitações (auditoria)
        @self.app.route('/api/users/<int:user_id>/deletion-requests', methods=['GET'])
        def list_deletion_requests(user_id):
            """Lista as solicitações do usuário, filtrando por status opcionalmente"""
            denied = self._authorize(user_id)
            if denied:
                return denied

            status = request.args.get('status')
            if status is not None and status not in {s.value for s in RequestStatus}:
                return jsonify({'success': False, 'error': f'Status inválido: {status}'}), 400
            try:
                requests_ = self.ledger.list_requests(user_id, status)
            except Exception as e:
                log_error("Erro ao listar solicitações de exclusão", e)
                return jsonify({'success': False, 'error': MSG_GENERIC_FAILURE}), 500

            return jsonify({
                'success': True,
                'requests': [r.to_dict() for r in requests_]
            })

        # API: Existe solicitação pendente?
        @self.app.route('/api/users/<int:user_id>/deletion-requests/pending', methods=['GET'])
        def has_pending_request(user_id):
            denied = self._authorize(user_id)
            if denied:
                return denied

            try:
                pending = self.ledger.has_pending_request(user_id)
            except Exception as e:
                log_error("Erro ao consultar solicitação pendente", e)
                return jsonify({'success': False, 'error': MSG_GENERIC_FAILURE}), 500
            return jsonify({'success': True, 'pending': pending})

    def get_local_ip(self) -> str:
        """Obtém o IP local da máquina"""
        try:
            s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            s.connect(("8.8.8.8", 80))
            local_ip = s.getsockname()[0]
            s.close()
            return local_ip
        except OSError:
            return "127.0.0.1"

    def run(self, debug: bool = False):
        """
        Inicia o servidor web

        Args:
            debug: Modo debug do Flask
        """
        local_ip = self.get_local_ip()
        log_event(f"API de exclusão disponível em http://{local_ip}:{self.port}")
        self.app.run(host=self.host, port=self.port, debug=debug, use_reloader=False, threaded=True)


def start_server(orchestrator: DeletionOrchestrator, session: SessionContext,
                 host: str = '0.0.0.0', port: int = 5000) -> threading.Thread:
    """Inicia o servidor numa thread daemon (a aplicação desktop continua no controle)"""
    server = WebServer(orchestrator, session, host=host, port=port)
    thread = threading.Thread(target=server.run, name="web-server", daemon=True)
    thread.start()
    return thread
