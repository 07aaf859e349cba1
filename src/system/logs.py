"""Subsistema de logs do display.

Fornece helpers de nível superior para escrita de logs em texto e JSONL e o
caminho do ficheiro de debug diário. Os logs vão para ficheiros para não
competirem com o ecrã do display.
"""

import os
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .log_helpers import (
    build_human_line,
    build_json_entry,
    ensure_dir_writable,
    format_date_for_log,
    normalize_message_for_human,
    sanitize_log_name,
    write_json,
    write_text,
)

logger = logging.getLogger(__name__)

# ========================
# 0. Configuração padrão
# ========================

LOG_ROOT = (os.getenv("TELEMETRY_LOG_ROOT", "logs") or "logs").strip() or "logs"

DEBUG_LOG_FILENAME = "debug_log"


# ========================
# 1. Diretórios e Paths
# ========================


@dataclass(frozen=True)
# Representa os diretórios usados pelo subsistema de logs
class LogPaths:
    """Agrupa caminhos usados pelo subsistema de logging."""

    root: Path
    log_dir: Path
    json_dir: Path
    debug_dir: Path

    def __iter__(self):
        """Iterador simples que retorna tupla com os paths."""
        return iter((self.root, self.log_dir, self.json_dir, self.debug_dir))


def get_log_paths(root: str | Path | None = None) -> LogPaths:
    """Resolve raiz de logs e garante diretórios criados.

    Ordem de preferência: argumento, `TELEMETRY_LOG_ROOT`, `LOG_ROOT`.
    """
    env_root = os.getenv("TELEMETRY_LOG_ROOT")
    candidate = root if root else (env_root if env_root else LOG_ROOT)
    log_root = Path(candidate)

    log_dir = log_root / "log"
    json_dir = log_root / "json"
    debug_dir = log_root / "debug"
    for p in (log_root, log_dir, json_dir, debug_dir):
        ensure_dir_writable(p)

    return LogPaths(log_root, log_dir, json_dir, debug_dir)


# Gera o nome base para arquivos de log; consumido por write_log
def _resolve_filename(name: str) -> str:
    """Gera nome base de arquivo de log com data."""
    base = sanitize_log_name(name or DEBUG_LOG_FILENAME, DEBUG_LOG_FILENAME)
    return f"{base}-{format_date_for_log(None)}"


# ========================
# 2. Escrita de Logs
# ========================


def write_log(
    name: str,
    level: str,
    message: str | list[str],
    extra: dict | None = None,
    human_enable: bool = True,
    json_enable: bool = True,
    root: str | Path | None = None,
) -> None:
    """Grava mensagens em arquivo texto e/ou jsonl.

    Aceita uma mensagem ou lista de mensagens; cada uma gera uma linha.
    """
    filename = _resolve_filename(name)
    messages = list(message) if isinstance(message, (list, tuple)) else [message]

    lp = get_log_paths(root)
    plain_path = lp.log_dir / f"{filename}.log"
    jsonl_path = lp.json_dir / f"{filename}.jsonl"

    for msg in messages:
        ts = datetime.now(timezone.utc).isoformat()
        if human_enable:
            human_msg = normalize_message_for_human(msg)
            write_text(plain_path, build_human_line(ts, level, human_msg, extra))
        if json_enable:
            write_json(jsonl_path, build_json_entry(ts, level, normalize_message_for_human(msg), extra))


# Retorna o caminho do arquivo de debug do dia; usado por main
def get_debug_file_path(root: str | Path | None = None) -> Path:
    """Retorna caminho do arquivo de debug diário."""
    date_str = format_date_for_log(None)
    return get_log_paths(root).debug_dir / f"{DEBUG_LOG_FILENAME}-{date_str}.txt"
