"""Estado do display e ponto de entrada de cada ciclo (`display_tick`).

`DisplayState` agrupa a fonte de contadores, a configuração imutável, o
renderer e o único `RateTracker`. Pré-condição: `display_tick` nunca é
chamado concorrentemente para o mesmo estado; o scheduler dono garante
isso (ver `core.run_loop`), por isso não há lock aqui.
"""

import time
from typing import Callable, Optional
import logging

from ..config.settings import RenderConfig
from ..core.emitter import TerminalRenderer
from ..system.time_helpers import elapsed_seconds
from .counters import CounterSet, CounterSource
from .formatters import build_report
from .rate import RateTracker, clamp_iterations
from .snapshot import take_snapshot

logger = logging.getLogger(__name__)


class DisplayState:
    """Estado privado de um renderer.

    - source: leitura sem lock dos contadores dos workers.
    - config: `RenderConfig` definido no arranque.
    - renderer: destino do ecrã (stdout por padrão).
    - tracker: contagem do ciclo anterior para a taxa instantânea.
    """

    def __init__(
        self,
        counters: CounterSet,
        config: RenderConfig,
        renderer: Optional[TerminalRenderer] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.source = CounterSource(counters)
        self.config = config
        self.renderer = renderer or TerminalRenderer(max_bytes=config.buffer_size)
        self.tracker = RateTracker()
        self.clock = clock
        self.ticks = 0
        self.last_sections: list[str] = []


def display_tick(state: DisplayState, now: Optional[float] = None) -> bool:
    """Executa um ciclo completo: snapshot, taxa, relatório e escrita.

    Retorna o resultado do renderer (sucesso/falha, apenas informativo).
    Nunca propaga exceções.
    """
    try:
        snapshot = take_snapshot(state.source)
        current = clamp_iterations(snapshot.mutations, state.config.mutations_max)
        rate = state.tracker.compute_rate(current)
        ts = state.clock() if now is None else now
        elapsed = elapsed_seconds(state.config.time_start, ts)
        sections = build_report(snapshot, state.config, elapsed, rate)
    except Exception:
        logger.debug("Falha ao construir relatório do display", exc_info=True)
        return False
    state.ticks += 1
    state.last_sections = sections
    return state.renderer.render(sections)
