"""Emissor do relatório para o terminal.

Junta as secções num único buffer limitado e faz exatamente uma escrita no
descritor de saída por ciclo, para que o ecrã (incluindo a sequência de
limpeza) nunca seja partido em duas escritas. Falhas de escrita são
engolidas: o display é apenas diagnóstico.
"""

import io
import logging
import os
import sys
from typing import Iterable

# ruff: noqa: D401

DEFAULT_MAX_BYTES = 4096

logger = logging.getLogger(__name__)


def _truncate(data: bytes, max_bytes: int) -> bytes:
    """Corta `data` em `max_bytes`, descartando um caractere UTF-8 incompleto no fim."""
    if len(data) <= max_bytes:
        return data
    cut = data[:max_bytes]
    return cut.decode("utf-8", errors="ignore").encode("utf-8")


class TerminalRenderer:
    """Escreve o relatório num descritor de ficheiro com um único `os.write`.

    Quando `fd` é None, usa `sys.stdout.fileno()` resolvido no momento da
    escrita.
    """

    def __init__(self, fd: int | None = None, max_bytes: int = DEFAULT_MAX_BYTES):
        if max_bytes <= 0:
            raise ValueError("max_bytes deve ser > 0")
        self.fd = fd
        self.max_bytes = int(max_bytes)
        self.last_written = 0

    def _resolve_fd(self) -> int:
        if self.fd is not None:
            return self.fd
        return sys.stdout.fileno()

    def encode(self, sections: Iterable[str]) -> bytes:
        """Junta e codifica as secções, truncando ao limite do buffer."""
        text = "".join(sections)
        return _truncate(text.encode("utf-8", errors="replace"), self.max_bytes)

    def render(self, sections: Iterable[str]) -> bool:
        """Emita as secções numa única escrita.

        Retorna True somente quando todos os bytes foram escritos. Qualquer
        erro de escrita retorna False, sem retry.
        """
        self.last_written = 0
        try:
            data = self.encode(sections)
        except Exception:
            logger.debug("Falha ao construir buffer do display", exc_info=True)
            return False
        if not data:
            return False
        try:
            written = os.write(self._resolve_fd(), data)
        except (OSError, ValueError, io.UnsupportedOperation) as exc:
            logger.debug("Falha ao escrever display: %s", exc)
            return False
        self.last_written = written
        return written == len(data)
