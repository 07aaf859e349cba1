"""Parser de argumentos do display de telemetria.

Docstrings e mensagens em português.

Este módulo fornece um parser simples que expõe:
- intervalo entre atualizações do ecrã (-i / --interval)
- número de ciclos (-c / --cycles), 0 = infinito
- número de workers simulados (-w / --workers)
- verbosidade (-v) e opções de logging (nivel e caminho raiz)

As funções retornam objetos compatíveis com argparse.Namespace para
serem consumidos por `src.main`.
"""

import argparse
import logging
import os
from typing import Sequence

# ========================
# 0. Configuração do parser e argumentos padrão
# ========================


# Função principal do módulo; cria e retorna o ArgumentParser configurado
def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o display."""
    parser = argparse.ArgumentParser(
        prog="fuzz-telemetry",
        description="Display de telemetria: estatísticas ao vivo de um pool de workers",
    )

    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=1.0,
        help="Intervalo em segundos entre atualizações do ecrã (float).",
    )
    parser.add_argument(
        "-c",
        "--cycles",
        type=int,
        default=0,
        help="Número de atualizações a executar (0 = infinito).",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=0,
        help="Número de workers simulados (0 = número de threads configurado).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Aumenta a verbosidade dos logs (-v, -vv)",
    )
    parser.add_argument(
        "--log-root",
        dest="log_root",
        type=str,
        default=None,
        help="Caminho raiz para os logs (substitui TELEMETRY_LOG_ROOT)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=None,
        help="Nível de logging (DEBUG/INFO/WARNING/ERROR). Se ausente, definido por -v",
    )

    return parser


# ========================
# 1. Funções auxiliares para análise e validação de argumentos
# ========================


# Auxilia src.main; criado para analisar argv e validar argumentos
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv e retorna Namespace validado para uso no programa."""
    parser = configure_argparser()
    ns = parser.parse_args(argv)
    env_map = {
        "interval": "TELEMETRY_INTERVAL_SEC",
        "cycles": "TELEMETRY_CYCLES",
        "workers": "TELEMETRY_WORKERS",
        "verbose": "TELEMETRY_VERBOSE",
        "log_root": "TELEMETRY_LOG_ROOT",
        "log_level": "TELEMETRY_LOG_LEVEL",
    }

    # Overrides via ambiente SOMENTE quando o argumento não veio da CLI.
    for arg, env_var in env_map.items():
        env_val = os.getenv(env_var)
        if env_val is None:
            continue
        default_val = parser.get_default(arg)
        current_val = getattr(ns, arg, None)
        if current_val is not None and current_val != default_val:
            continue
        try:
            if arg == "interval":
                setattr(ns, arg, float(env_val))
            elif arg in ("cycles", "workers", "verbose"):
                setattr(ns, arg, int(env_val))
            else:
                setattr(ns, arg, env_val)
        except ValueError as exc:
            logging.getLogger(__name__).warning(f"{env_var} inválido ('{env_val}'): {exc}. Usando valor do argumento.")
    validate_args(ns)
    return ns


# Auxilia parse_args; criado para garantir valores corretos e seguros
def validate_args(args: argparse.Namespace) -> None:
    """Valida e normaliza argumentos do programa."""
    if getattr(args, "interval", 1.0) is None:
        args.interval = 1.0
    try:
        args.interval = float(args.interval)
    except (TypeError, ValueError) as exc:
        raise ValueError("intervalo deve ser um número") from exc
    if args.interval < 0.0:
        raise ValueError("intervalo deve ser >= 0.0")

    try:
        args.cycles = int(args.cycles)
    except (TypeError, ValueError) as exc:
        raise ValueError("cycles deve ser um inteiro >= 0") from exc
    if args.cycles < 0:
        raise ValueError("cycles deve ser >= 0")

    try:
        args.workers = int(getattr(args, "workers", 0) or 0)
    except (TypeError, ValueError) as exc:
        raise ValueError("workers deve ser um inteiro >= 0") from exc
    if args.workers < 0:
        raise ValueError("workers deve ser >= 0")


# ========================
# 2. Função auxiliar para configuração de logging
# ========================


# Auxilia src.main; criado para extrair configuração de logging dos argumentos
def get_log_config(args: argparse.Namespace) -> dict:
    """Retorna dict com configuração de logging ('level' e 'root')."""
    if getattr(args, "log_level", None):
        level = str(args.log_level).upper()
    else:
        v = getattr(args, "verbose", 0) or 0
        if v >= 2:
            level = "DEBUG"
        elif v == 1:
            level = "INFO"
        else:
            level = "WARNING"

    return {"level": level, "root": getattr(args, "log_root", None)}
