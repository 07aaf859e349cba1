"""Configurações do display de telemetria.

Este módulo centraliza quais grupos opcionais de contadores são exibidos e os
parâmetros estáticos do fuzzer mostrados no ecrã. Carrega valores a partir de
``DEFAULT_SETTINGS`` e permite overrides via arquivo ``.env`` ou variáveis de
ambiente (prefixo ``TELEMETRY_*``).
As funções públicas principais são:

- ``load_settings()`` -> dicionário com as configurações efetivas.
- ``validate_settings()`` -> valida tipos e limites.
- ``build_render_config()`` -> ``RenderConfig`` imutável usado pelo display.
- ``get_render_config()`` -> configuração validada (ou padrão em caso de erro).

Comentários e mensagens de log estão em português.
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path


# ========================
# Constantes e padrões globais
# ========================

DYNFILE_NONE = 0x00
DYNFILE_INSTR_COUNT = 0x01
DYNFILE_BRANCH_COUNT = 0x02
DYNFILE_BTS_BLOCK = 0x08
DYNFILE_BTS_EDGE = 0x10
DYNFILE_IPT_BLOCK = 0x20
DYNFILE_CUSTOM = 0x40

DYNFILE_NAMES = {
    "none": DYNFILE_NONE,
    "instr": DYNFILE_INSTR_COUNT,
    "branch": DYNFILE_BRANCH_COUNT,
    "bts_block": DYNFILE_BTS_BLOCK,
    "bts_edge": DYNFILE_BTS_EDGE,
    "ipt_block": DYNFILE_IPT_BLOCK,
    "custom": DYNFILE_CUSTOM,
}

DYNFILE_ALL = (
    DYNFILE_INSTR_COUNT | DYNFILE_BRANCH_COUNT | DYNFILE_BTS_BLOCK | DYNFILE_BTS_EDGE | DYNFILE_IPT_BLOCK | DYNFILE_CUSTOM
)

MAX_DYNFILE_ITER = 0x2000
MIN_BUFFER_SIZE = 256

DEFAULT_SETTINGS = {
    "mutations_max": 0,
    "input_file": "",
    "cmdline": "",
    "pid": 0,
    "pid_cmd": "",
    "threads": 0,
    "flip_rate": 0.001,
    "use_verifier": False,
    "file_cnt": 0,
    "dynfile_method": DYNFILE_NONE,
    "use_sancov": False,
    "max_file_sz": 1024 * 1024,
    "max_dynfile_iter": MAX_DYNFILE_ITER,
    "buffer_size": 4096,
}

# chave de ambiente -> (chave em settings, conversor)
_ENV_KEYS = {
    "TELEMETRY_MUTATIONS_MAX": ("mutations_max", "int"),
    "TELEMETRY_INPUT": ("input_file", "str"),
    "TELEMETRY_CMDLINE": ("cmdline", "str"),
    "TELEMETRY_PID": ("pid", "int"),
    "TELEMETRY_PID_CMD": ("pid_cmd", "str"),
    "TELEMETRY_THREADS": ("threads", "int"),
    "TELEMETRY_FLIP_RATE": ("flip_rate", "float"),
    "TELEMETRY_USE_VERIFIER": ("use_verifier", "bool"),
    "TELEMETRY_FILE_CNT": ("file_cnt", "int"),
    "TELEMETRY_DYNFILE_METHOD": ("dynfile_method", "dynfile"),
    "TELEMETRY_USE_SANCOV": ("use_sancov", "bool"),
    "TELEMETRY_MAX_FILE_SZ": ("max_file_sz", "int"),
    "TELEMETRY_MAX_DYNFILE_ITER": ("max_dynfile_iter", "int"),
    "TELEMETRY_BUFFER_SIZE": ("buffer_size", "int"),
}


@dataclass(frozen=True)
class RenderConfig:
    """Configuração estática do display, definida uma vez no arranque."""

    time_start: float
    mutations_max: int = 0
    input_file: str = ""
    cmdline: str = ""
    pid: int = 0
    pid_cmd: str = ""
    threads: int = 1
    flip_rate: float = 0.001
    use_verifier: bool = False
    file_cnt: int = 0
    dynfile_method: int = DYNFILE_NONE
    use_sancov: bool = False
    max_file_sz: int = 1024 * 1024
    max_dynfile_iter: int = MAX_DYNFILE_ITER
    buffer_size: int = 4096


# ========================
# 1. Carregamento das configurações
# ========================


# Função principal do módulo; carrega todas as configurações do ambiente
def load_settings() -> dict:
    """Carrega configurações combinando DEFAULTS + .env + ambiente.

    As variáveis em ambiente sobrescrevem valores do arquivo `.env`. Valores
    inválidos são ignorados com warning e o padrão é mantido.
    """
    import logging

    logger = logging.getLogger(__name__)

    settings = DEFAULT_SETTINGS.copy()

    project_root = Path(__file__).resolve().parents[2]
    env_path = Path(os.getenv("TELEMETRY_ENV_FILE", project_root / ".env"))

    env_items = _merge_env_items(env_path, logger)
    _apply_env_overrides(env_items, settings, logger)
    return settings


# ========================
# 2. Funções auxiliares para ambiente e overrides
# ========================


# Auxilia load_settings; criado para centralizar leitura do .env
def _read_env_file(path: Path | str) -> dict:
    """Lê um arquivo `.env` e devolve um dicionário chave->valor.

    Linhas vazias e comentários (começando com '#') são ignorados.
    """
    import logging

    logger = logging.getLogger(__name__)
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip().strip('"').strip("'")
                result[key] = val
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


# Auxilia load_settings; criado para unir variáveis do ambiente e .env
def _merge_env_items(env_path: Path, logger) -> dict:
    """Retorna um mapeamento combinado de `.env` e env vars do processo.

    As variáveis do processo sobrescrevem o arquivo `.env`.
    """
    env_items = _read_env_file(env_path)
    if env_items == {} and env_path.exists():
        logger.warning("Erro ou ficheiro .env vazio em %s", env_path)
    env_items.update(os.environ)
    return env_items


def _parse_bool(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    val = str(raw).strip().lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"valor booleano inválido: {raw!r}")


def parse_dynfile_method(raw) -> int:
    """Converte um inteiro ou lista de nomes (``instr,bts_edge``) em bitmask.

    Aceita também hexadecimal (``0x18``). Nomes desconhecidos geram ValueError.
    """
    if isinstance(raw, int):
        return raw
    text = str(raw).strip().lower()
    if not text:
        return DYNFILE_NONE
    try:
        return int(text, 0)
    except ValueError:
        pass
    mask = DYNFILE_NONE
    for part in text.replace("|", ",").split(","):
        name = part.strip()
        if not name:
            continue
        if name not in DYNFILE_NAMES:
            raise ValueError(f"método dynfile desconhecido: {name}")
        mask |= DYNFILE_NAMES[name]
    return mask


# Auxilia load_settings; criado para aplicar overrides por tipo
def _apply_env_overrides(env_items: dict, settings: dict, logger) -> None:
    """Aplica overrides de ``TELEMETRY_*`` em ``settings``."""
    converters = {
        "int": int,
        "float": float,
        "str": str,
        "bool": _parse_bool,
        "dynfile": parse_dynfile_method,
    }
    for env_key, (key, kind) in _ENV_KEYS.items():
        if env_key not in env_items:
            continue
        raw_val = env_items[env_key]
        try:
            settings[key] = converters[kind](raw_val)
        except (TypeError, ValueError):
            logger.warning("Valor inválido para %s: %s", env_key, raw_val)


# ========================
# 3. Validação e construção do RenderConfig
# ========================


# Função principal de validação; garante tipos e limites
def validate_settings(settings: dict) -> dict:
    """Normaliza e valida o dicionário de configurações.

    Preenche chaves ausentes com os padrões e levanta ValueError/TypeError
    para valores fora dos limites.
    """
    import logging

    logger = logging.getLogger(__name__)
    if not isinstance(settings, dict):
        raise TypeError("settings deve ser um dict")

    for key, default in DEFAULT_SETTINGS.items():
        settings.setdefault(key, default)

    for key in ("mutations_max", "pid", "threads", "file_cnt", "max_file_sz", "max_dynfile_iter"):
        try:
            settings[key] = int(settings[key])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{key} deve ser um inteiro: {settings[key]!r}") from exc
        if settings[key] < 0:
            raise ValueError(f"{key} deve ser >= 0")

    try:
        settings["flip_rate"] = float(settings["flip_rate"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"flip_rate deve ser numérico: {settings['flip_rate']!r}") from exc
    if not 0.0 <= settings["flip_rate"] <= 1.0:
        raise ValueError("flip_rate deve ficar entre 0 e 1")

    method = parse_dynfile_method(settings["dynfile_method"])
    if method & ~DYNFILE_ALL:
        raise ValueError(f"bits desconhecidos em dynfile_method: {method:#x}")
    settings["dynfile_method"] = method

    settings["use_verifier"] = _parse_bool(settings["use_verifier"])
    settings["use_sancov"] = _parse_bool(settings["use_sancov"])

    try:
        settings["buffer_size"] = int(settings["buffer_size"])
    except (TypeError, ValueError) as exc:
        raise ValueError("buffer_size deve ser um inteiro") from exc
    if settings["buffer_size"] < MIN_BUFFER_SIZE:
        raise ValueError(f"buffer_size deve ser >= {MIN_BUFFER_SIZE}")

    logger.debug("Configurações validadas e normalizadas")
    return settings


def build_render_config(settings: dict, time_start: float | None = None) -> RenderConfig:
    """Constrói o ``RenderConfig`` imutável a partir de settings validados.

    Resolve o comando do processo remoto via psutil quando só o pid foi
    configurado e usa o número de CPUs quando ``threads`` é 0.
    """
    from ..system.helpers import default_thread_count, process_cmdline

    pid = settings["pid"]
    pid_cmd = settings["pid_cmd"]
    if pid > 0 and not pid_cmd:
        pid_cmd = process_cmdline(pid)

    threads = settings["threads"] or default_thread_count()

    return RenderConfig(
        time_start=time.time() if time_start is None else float(time_start),
        mutations_max=settings["mutations_max"],
        input_file=str(settings["input_file"]),
        cmdline=str(settings["cmdline"]),
        pid=pid,
        pid_cmd=pid_cmd,
        threads=threads,
        flip_rate=settings["flip_rate"],
        use_verifier=settings["use_verifier"],
        file_cnt=settings["file_cnt"],
        dynfile_method=settings["dynfile_method"],
        use_sancov=settings["use_sancov"],
        max_file_sz=settings["max_file_sz"],
        max_dynfile_iter=settings["max_dynfile_iter"],
        buffer_size=settings["buffer_size"],
    )


# Auxilia main; retorna configuração validada ou padrão em caso de erro
def get_render_config(settings: dict | None = None, time_start: float | None = None) -> RenderConfig:
    """Retorna o ``RenderConfig`` validado.

    Em caso de erro de validação, usa ``DEFAULT_SETTINGS`` e registra aviso.
    """
    import logging

    logger = logging.getLogger(__name__)
    try:
        if settings is None:
            settings = load_settings()
        validated = validate_settings(settings)
    except (TypeError, ValueError, OSError) as exc:
        logger.warning("Falha ao validar settings; serão usados DEFAULT_SETTINGS: %s", exc)
        validated = validate_settings(DEFAULT_SETTINGS.copy())
    return build_render_config(validated, time_start)
