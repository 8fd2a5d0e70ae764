# config.py
# Configurações globais e leitura de YAML

from typing import Dict, Any, Optional
import yaml
import os
import sys

DEFAULT_DB_NAME = 'acucaradas.db'

DEFAULT_WEB_PORT = 5000

DEFAULT_NOTIFICATION_TIMEOUT = 10.0


def get_app_data_directory() -> str:
    """
    Retorna o diretório de dados da aplicação.
    A variável ACUCARADAS_DATA_DIR tem prioridade (útil em testes e instalações em rede).
    """
    override = os.getenv('ACUCARADAS_DATA_DIR')
    if override:
        app_data_dir = override
    elif sys.platform == 'win32' and os.getenv('LOCALAPPDATA'):
        app_data_dir = os.path.join(os.getenv('LOCALAPPDATA', ''), 'Acucaradas')
    else:
        app_data_dir = os.path.join(os.path.expanduser("~"), ".acucaradas")

    os.makedirs(app_data_dir, exist_ok=True)
    return app_data_dir


def get_config_path() -> str:
    """Caminho do config.yaml dentro do diretório de dados"""
    return os.path.join(get_app_data_directory(), 'config.yaml')


def load_config() -> Dict[str, Any]:
    """
    Carrega as configurações do arquivo YAML.

    Returns:
        Dict[str, Any]: Dicionário com as configurações
    """
    config_path = get_config_path()
    if not os.path.exists(config_path):
        return {}
    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def save_config(data: Dict[str, Any]) -> None:
    """
    Salva as configurações no arquivo YAML.

    Args:
        data: Dicionário com as configurações para salvar
    """
    with open(get_config_path(), 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f, allow_unicode=True)


def get_database_path() -> str:
    """
    Retorna o caminho do banco de dados.

    Procura em ordem de prioridade:
    1. Configuração do usuário (database_path)
    2. acucaradas.db no diretório de dados da aplicação
    """
    config = load_config()
    db_path = config.get('database_path')
    if db_path:
        return os.path.abspath(db_path)
    return os.path.join(get_app_data_directory(), DEFAULT_DB_NAME)


def set_database_path(path: str) -> bool:
    """
    Define o caminho do banco de dados nas configurações.

    Returns:
        bool: True se o caminho foi salvo, False se o diretório não é gravável
    """
    if not path:
        return False

    path = os.path.abspath(path)
    directory = os.path.dirname(path)
    if not os.path.isdir(directory) or not os.access(directory, os.W_OK):
        return False

    config = load_config()
    config['database_path'] = path
    save_config(config)
    return True


def get_log_directory() -> Optional[str]:
    """Diretório de logs configurado (None = padrão do logger)"""
    return load_config().get('log_dir')


def get_notification_settings() -> Dict[str, Any]:
    """
    Configurações do aviso remoto de exclusão.

    Returns:
        Dict com api_base_url (None desativa o aviso), timeout e token
    """
    section = load_config().get('notification') or {}
    return {
        'api_base_url': section.get('api_base_url') or None,
        'timeout': float(section.get('timeout', DEFAULT_NOTIFICATION_TIMEOUT)),
        'token': section.get('token') or None,
    }


def get_web_server_settings() -> Dict[str, Any]:
    """Configurações do servidor web local (API de exclusão)"""
    section = load_config().get('web_server') or {}
    return {
        'enabled': bool(section.get('enabled', False)),
        'host': section.get('host', '0.0.0.0'),
        'port': int(section.get('port', DEFAULT_WEB_PORT)),
    }
