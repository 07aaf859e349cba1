"""Core do programa de telemetria.

Loop principal que chama `display_tick` em intervalo fixo. É o único
chamador do display: um ciclo termina antes do próximo começar, o que
garante a pré-condição de não sobreposição do `DisplayState`.
"""

import logging
import threading
import time
from typing import Optional

from ..monitoring import state as _display
from ..system.logs import write_log
from ..system.log_helpers import strip_ansi

logger = logging.getLogger(__name__)


# ========================
# 1. Resumo final
# ========================


def _final_summary(state) -> str:
    """Linha única com o último relatório, sem sequências ANSI."""
    lines = [strip_ansi(s).strip() for s in state.last_sections[1:-1]]
    return " | ".join(x.replace("\n", " | ") for x in lines if x)


def _write_final_summary(state, log_root=None) -> None:
    try:
        summary = _final_summary(state)
        if summary:
            write_log("telemetry", "INFO", summary, extra={"ticks": state.ticks}, root=log_root)
    except Exception as exc:
        logger.debug("Falha ao gravar resumo final: %s", exc, exc_info=True)


# ========================
# 2. Loop principal
# ========================


# Função principal do módulo; executa o loop de display
def run_loop(
    state,
    interval: float,
    cycles: int,
    stop_event: Optional[threading.Event] = None,
    log_root=None,
) -> int:
    """Loop principal que atualiza o display periodicamente.

    Parâmetros:
        state: `DisplayState` dono do renderer e do `RateTracker`.
        interval: atraso entre ciclos em segundos (float).
        cycles: número de ciclos a executar (0 = infinito).
        stop_event: quando definido, termina o loop no próximo ciclo.
        log_root: raiz dos logs para o resumo final (None = TELEMETRY_LOG_ROOT ou `logs`).

    Retorna o número de ciclos executados.
    """
    executed = 0
    try:
        while stop_event is None or not stop_event.is_set():
            try:
                if not _display.display_tick(state):
                    logger.debug("display_tick não escreveu o ecrã completo")
            except Exception as exc:
                logger.debug("Erro no ciclo do display: %s", exc, exc_info=True)
            executed += 1
            if cycles != 0 and executed >= cycles:
                break
            if interval > 0.0:
                if stop_event is not None:
                    stop_event.wait(interval)
                else:
                    time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Recebido KeyboardInterrupt, saindo...")
    _write_final_summary(state, log_root)
    return executed
