# vulture: ignore
"""Helpers de baixo nível para o subsistema de logging.

Fornece escrita durável em disco com lock de ficheiro, normalização de
nomes/mensagens e construção de linhas humanas e JSONL.
"""

from pathlib import Path
import os
from datetime import datetime, timezone, date
import logging
import json as _json
import re

import portalocker

logger = logging.getLogger(__name__)

# Durabilidade controlada via variável de ambiente
DURABLE_WRITES = os.environ.get("TELEMETRY_DURABLE_WRITES", "1").lower() in ("1", "true", "yes", "on")


# -----------------------
# Escrita segura
# -----------------------
def write_text(path: Path, text: str) -> None:
    """Anexe texto a `path` de forma segura, usando lock e fsync.

    Cria o diretório pai e aplica um lock exclusivo com `portalocker`. Em caso
    de falha grava uma mensagem de erro e segue em modo best-effort.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            locked = False
            try:
                try:
                    portalocker.lock(fh, portalocker.LOCK_EX)
                    locked = True
                except Exception as exc:
                    logger.debug("write_text: portalocker.lock falhou em %s: %s", path, exc)

                fh.write(text)
                fh.flush()

                if DURABLE_WRITES:
                    try:
                        os.fsync(fh.fileno())
                    except Exception as exc:
                        logger.debug("write_text: fsync falhou em %s: %s", path, exc)
            finally:
                if locked:
                    try:
                        portalocker.unlock(fh)
                    except Exception as exc:
                        logger.debug("write_text: portalocker.unlock falhou em %s: %s", path, exc)
    except OSError as exc:
        logger.error("write_text: falhou em %s: %s", path, exc, exc_info=True)


def write_json(path: Path, obj: dict) -> None:
    """Serialize um objeto como JSONL e anexe ao ficheiro `path`.

    Em caso de objetos não serializáveis por padrão, usa `default=str` como
    fallback.
    """
    try:
        line = _json.dumps(obj, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        try:
            line = _json.dumps(obj, ensure_ascii=False, default=str) + "\n"
            logger.error("write_json: fallback default=str usado em %s: %s", path, exc, exc_info=True)
        except Exception as exc2:
            logger.error("write_json: falhou em %s: %s; %s", path, exc, exc2, exc_info=True)
            return
    write_text(path, line)


# -----------------------
# Normalização e formatação
# -----------------------
def sanitize_log_name(raw_name: str, fallback: str = "debug_log") -> str:
    """Sanitize o nome base de um ficheiro de log para uso seguro no filesystem.

    Remove caracteres potencialmente perigosos e limita o comprimento.
    """
    rn = Path(raw_name or fallback).name.lstrip(".")
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", rn)
    if not name:
        name = fallback
    if len(name) > 200:
        name = name[:200]
    return name


def strip_ansi(text: str) -> str:
    """Remove sequências ANSI (negrito/reset/limpeza) de `text`."""
    return re.sub(r"\x1b\[[0-9;]*[A-Za-z]", "", text)


def normalize_message_for_human(msg, max_len: int | None = 10000) -> str:
    """Normalize uma mensagem para apresentação humana, removendo novas linhas e ANSI.

    Corta a mensagem para `max_len` quando definido.
    """
    try:
        s = "" if msg is None else str(msg)
    except (TypeError, ValueError):
        s = "<unrepr>"
    s = strip_ansi(s).replace("\n", " ").replace("\r", " ")
    return s[:max_len] if max_len and len(s) > max_len else s


def build_json_entry(ts: str, level: str, msg, extra: dict | None = None) -> dict:
    """Construa um dicionário pronto para ser serializado em JSONL.

    Insere campos `ts`, `level`, `msg` e mescla `extra` quando fornecido.
    """
    entry = {"ts": ts, "level": level, "msg": msg}
    if extra and isinstance(extra, dict):
        for k, v in extra.items():
            entry[k if k not in entry else f"extra_{k}"] = v
    elif extra:
        entry["meta"] = extra
    return entry


def build_human_line(ts: str, level: str, msg_str: str, extras: dict | None = None) -> str:
    r"""Compõe linha legível por humanos.

    Formato: ``<ts> [LEVEL] [extras...] <msg_str>\n`` com a mensagem numa
    única linha.
    """
    extras_part = ""
    if extras and isinstance(extras, dict):
        kvs = []
        for k, v in extras.items():
            sval = str(v) if not isinstance(v, (list, dict)) else repr(v)
            sval = sval.replace("\n", " ").replace("\r", " ")
            kvs.append(f"{k}={sval}")
        if kvs:
            extras_part = " " + " ".join(kvs)

    try:
        body = "" if msg_str is None else str(msg_str)
    except Exception:
        body = "<unrepr>"

    single = body.replace("\n", " ").replace("\r", " ").strip()
    return f"{ts} [{level}]{extras_part} {single}\n"


def format_date_for_log(dt=None) -> str:
    """Retorna data no formato YYYY-MM-DD (segura para nomes)."""
    try:
        if dt is None:
            return date.today().isoformat()
        if isinstance(dt, datetime):
            return dt.date().isoformat()
        if isinstance(dt, date):
            return dt.isoformat()
        return dt.date().isoformat()
    except (AttributeError, TypeError):
        return datetime.now(timezone.utc).date().isoformat()


# -----------------------
# Diretórios / permissões
# -----------------------
def ensure_dir_writable(p: Path) -> bool:
    """Garante, em melhor esforço, que `p` existe e é gravável."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except PermissionError as exc:
        logger.error("ensure_dir_writable: permission denied creating %s: %s", p, exc, exc_info=True)
        return False
    except OSError as exc:
        logger.error("ensure_dir_writable: failed for %s: %s", p, exc, exc_info=True)
        return False
    return os.access(p, os.W_OK)
