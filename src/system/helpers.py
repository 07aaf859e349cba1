"""Helpers genéricos de sistema.

Utilitários pequenos sobre processos usados pela configuração do display
(linha de comando de um processo remoto, número de CPUs).
"""

import logging
import shlex

import psutil

logger = logging.getLogger(__name__)

_UNKNOWN_CMD = "[unknown]"


def process_cmdline(pid: int) -> str:
    """Retorna a linha de comando do processo `pid` como string.

    Usa psutil; retorna '[unknown]' quando o processo não existe ou o acesso
    é negado.
    """
    try:
        parts = psutil.Process(int(pid)).cmdline()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess, ValueError) as exc:
        logger.debug("process_cmdline: falha para pid %s: %s", pid, exc)
        return _UNKNOWN_CMD
    if not parts:
        return _UNKNOWN_CMD
    return shlex.join(parts)


def default_thread_count() -> int:
    """Número de threads padrão: CPUs lógicas (mínimo 1)."""
    try:
        count = psutil.cpu_count(logical=True)
    except Exception as exc:
        logger.debug("cpu_count falhou: %s", exc, exc_info=True)
        count = None
    return int(count or 1)
