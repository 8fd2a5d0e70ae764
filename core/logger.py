# logger.py
# Logger e auditoria

import logging
import os
import sys
from datetime import datetime
from typing import Optional

LOGGER_NAME = "acucaradas"

logger = logging.getLogger(LOGGER_NAME)

_configured = False


def get_app_data_dir() -> str:
    """Retorna o diretório padrão de logs do usuário"""
    if sys.platform == 'win32':
        app_data = os.getenv('LOCALAPPDATA', os.getenv('APPDATA', ''))
        if app_data:
            log_dir = os.path.join(app_data, 'Acucaradas', 'logs')
        else:
            log_dir = os.path.join(os.path.expanduser('~'), '.acucaradas', 'logs')
    else:
        # Linux/Mac
        log_dir = os.path.expanduser('~/.acucaradas/logs')
    return log_dir


def configure_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> str:
    """
    Configura arquivo diário + console. Chamado uma vez pela aplicação.

    Returns:
        str: caminho do arquivo de log
    """
    global _configured
    log_dir = log_dir or get_app_data_dir()
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f'acucaradas_{datetime.now().strftime("%Y%m%d")}.log')

    if _configured:
        return log_path

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S'))

    # Adiciona também saída no console para debug
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%H:%M:%S'))

    logger.setLevel(level)
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    _configured = True
    return log_path


def log_event(msg: str):
    """Registra evento informativo"""
    logger.info(msg)


def log_error(msg: str, exc: Optional[BaseException] = None):
    """Registra erro com traceback opcional"""
    if exc:
        logger.error(f"{msg}: {str(exc)}", exc_info=exc)
    else:
        logger.error(msg)


def log_warning(msg: str):
    """Registra aviso"""
    logger.warning(msg)


def log_debug(msg: str):
    """Registra mensagem de debug"""
    logger.debug(msg)


def log_startup(log_path: str, db_path: str):
    """Registra informações de inicialização do sistema"""
    logger.info("=" * 60)
    logger.info("AÇUCARADAS - SISTEMA INICIADO")
    logger.info("=" * 60)
    logger.info(f"Versão Python: {sys.version}")
    logger.info(f"Sistema Operacional: {sys.platform}")
    logger.info(f"Executável: {sys.executable if getattr(sys, 'frozen', False) else 'Script Python'}")
    logger.info(f"Arquivo de log: {log_path}")
    logger.info(f"Banco de dados: {db_path}")
    logger.info("=" * 60)
