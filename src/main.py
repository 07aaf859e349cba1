"""Ponto de entrada do display de telemetria.

Este módulo realiza a inicialização da aplicação: parsing de argumentos CLI,
configuração de logging, instalação de handlers de debug, construção do
`RenderConfig`, arranque do pool de workers simulados e do loop de display.
A lógica de runtime fica em `core` para facilitar testes e reutilização.
"""

from .core.args import parse_args, get_log_config
import logging as _logging
import sys
from .system.logs import get_debug_file_path
from .core.core import run_loop
from .config.settings import get_render_config
from .monitoring.counters import CounterSet
from .monitoring.state import DisplayState
from .system.simulator import WorkerSimulator

import json as _json


def main(argv: list[str] | None = None) -> None:
    """Inicializa a aplicação e corre o loop de display.

    Args:
        argv: Lista de argumentos (usada em testes). Quando ``None`` a função
            utiliza os argumentos de linha de comando do processo.

    Returns:
        None

    """
    args = parse_args(argv)
    log_conf = get_log_config(args)

    level = getattr(_logging, log_conf.get("level", "WARNING"), _logging.WARNING)
    _logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        _setup_debug_file_handler(log_conf.get("root"))
    except Exception as exc:
        _logging.getLogger(__name__).debug("falha ao configurar debug file handler: %s", exc, exc_info=True)

    config = get_render_config()
    counters = CounterSet()
    state = DisplayState(counters, config)

    simulator = WorkerSimulator(counters, config, workers=args.workers or config.threads)
    simulator.start()
    try:
        executed = run_loop(state, interval=args.interval, cycles=args.cycles, log_root=log_conf.get("root"))
    finally:
        simulator.stop()
    _logging.getLogger(__name__).info("Display terminou após %d ciclos", executed)


def _setup_debug_file_handler(root=None) -> None:
    """Instala handlers de ficheiro para debug e hook global de exceções.

    Adiciona ao logger root um handler texto e um JSONL (uma linha de JSON por
    evento). Ambos em modo "best-effort": falhas na escrita do handler são
    capturadas para que o logging nunca derrube o display. Também instala um
    ``sys.excepthook`` que envia exceções não tratadas para o logger root.
    """
    debug_path = get_debug_file_path(root)

    fh = _logging.FileHandler(str(debug_path), encoding="utf-8")
    fh.setLevel(_logging.INFO)
    fmt = _logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    fh.setFormatter(fmt)

    jpath = debug_path.with_suffix(".jsonl")
    jfh = _logging.FileHandler(str(jpath), encoding="utf-8")
    jfh.setLevel(_logging.INFO)
    jfh.setFormatter(_get_json_formatter())

    root_logger = _logging.getLogger()
    if not _has_existing_file_handler(root_logger, fh, jfh):
        _wrap_emit_safe(fh)
        _wrap_emit_safe(jfh)
        root_logger.addHandler(fh)
        root_logger.addHandler(jfh)
    else:
        fh.close()
        jfh.close()

    def _exc_hook(exc_type, exc_value, exc_tb):
        try:
            root_logger.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        except Exception:
            sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _exc_hook


# Auxiliares extraídas para reduzir complexidade


def _get_json_formatter():
    class _JSONFormatter(_logging.Formatter):
        def format(self, record):
            try:
                ts = self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ")
            except Exception:
                ts = ""
            obj = {
                "ts": ts,
                "level": record.levelname,
                "name": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info:
                import traceback as _tb

                obj["exc"] = "".join(_tb.format_exception(*record.exc_info))
            return _json.dumps(obj, ensure_ascii=False)

    return _JSONFormatter()


def _has_existing_file_handler(root, fh, jfh):
    bases = (getattr(fh, "baseFilename", None), getattr(jfh, "baseFilename", None))
    for h in root.handlers:
        if isinstance(h, _logging.FileHandler) and getattr(h, "baseFilename", None) in bases:
            return True
    return False


def _wrap_emit_safe(handler):
    import types as _types

    orig = handler.emit

    def _emit_safe(self, record):
        try:
            return orig(record)
        except Exception:
            # stderr direto: registrar via logging poderia reentrar neste handler
            sys.stderr.write("debug handler emit failed\n")

    handler.emit = _types.MethodType(_emit_safe, handler)  # type: ignore[assignment]


if __name__ == "__main__":
    main()
