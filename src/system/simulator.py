"""Pool de workers simulados para demonstrar o display.

Cada worker incrementa os contadores como um motor de fuzzing faria: a
contagem de iterações sobe incondicionalmente (mesmo após `mutations_max`),
e crashes, timeouts e cobertura crescem aleatoriamente para os grupos
ativos no `RenderConfig`. O display nunca inicia workers; quem usa este
módulo é o `main`.
"""

import logging
import random
import threading
from typing import Optional

from ..config.settings import (
    DYNFILE_BRANCH_COUNT,
    DYNFILE_BTS_BLOCK,
    DYNFILE_BTS_EDGE,
    DYNFILE_CUSTOM,
    DYNFILE_INSTR_COUNT,
    DYNFILE_IPT_BLOCK,
    RenderConfig,
)
from ..monitoring.counters import PRIMARY_FIELD, CounterSet

logger = logging.getLogger(__name__)

# bit do método -> contador de hardware correspondente
_HW_FIELDS = (
    (DYNFILE_INSTR_COUNT, "cpu_instructions"),
    (DYNFILE_BRANCH_COUNT, "cpu_branches"),
    (DYNFILE_BTS_BLOCK, "bts_blocks"),
    (DYNFILE_BTS_EDGE, "bts_edges"),
    (DYNFILE_IPT_BLOCK, "ipt_blocks"),
    (DYNFILE_CUSTOM, "custom"),
)


class WorkerSimulator:
    """Inicia `workers` threads daemon que alteram um `CounterSet`."""

    def __init__(
        self,
        counters: CounterSet,
        config: RenderConfig,
        workers: int = 1,
        delay: float = 0.001,
        seed: Optional[int] = None,
    ):
        self.counters = counters
        self.config = config
        self.workers = max(1, int(workers))
        self.delay = float(delay)
        self._rng = random.Random(seed)
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        if config.use_sancov:
            self.counters.counter("sancov_total_bb").store(self._rng.randint(5000, 20000))
            self.counters.counter("sancov_dso").store(self._rng.randint(1, 8))

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        """Inicia as threads; chamadas repetidas são ignoradas."""
        if self.running:
            return
        self._stop.clear()
        self._threads = [
            threading.Thread(target=self._work, name=f"fuzz-worker-{i}", daemon=True) for i in range(self.workers)
        ]
        for t in self._threads:
            t.start()
        logger.info("Iniciados %d workers simulados", self.workers)

    def stop(self, timeout: float = 2.0) -> None:
        """Sinaliza paragem e aguarda as threads até `timeout` segundos cada."""
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads = []
        logger.info("Workers simulados parados")

    def step(self, rng: random.Random) -> None:
        """Uma iteração de fuzzing simulada."""
        c = self.counters
        cfg = self.config
        c.increment(PRIMARY_FIELD)
        roll = rng.random()
        if roll < 0.002:
            c.increment("crashes")
            if rng.random() < 0.3:
                c.increment("unique_crashes")
                if cfg.use_verifier:
                    c.increment("verified_crashes")
            elif rng.random() < 0.1:
                c.increment("blacklisted_crashes")
        elif roll < 0.004:
            c.increment("timeouts")

        for bit, field in _HW_FIELDS:
            if cfg.dynfile_method & bit:
                c.increment(field, rng.randint(1, 64))

        if cfg.dynfile_method or cfg.use_sancov:
            if rng.random() < 0.01:
                c.counter("dynamic_file_best_size").store(rng.randint(1, max(1, cfg.max_file_sz)))
            c.increment("dynamic_file_iter_expire")
            if c.counter("dynamic_file_iter_expire").load() > cfg.max_dynfile_iter:
                c.counter("dynamic_file_iter_expire").store(0)

        if cfg.use_sancov and rng.random() < 0.01:
            total = c.counter("sancov_total_bb").load()
            if c.counter("sancov_hit_bb").load() < total:
                c.increment("sancov_hit_bb")
                c.increment("sancov_new_bb")
            if rng.random() < 0.01:
                c.increment("sancov_crashes")

    def _work(self) -> None:
        rng = random.Random(self._rng.random())
        while not self._stop.is_set():
            try:
                self.step(rng)
            except Exception:
                logger.debug("worker simulado falhou num passo", exc_info=True)
            if self.delay > 0:
                self._stop.wait(self.delay)
