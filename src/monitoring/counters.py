"""Contadores partilhados entre os workers e o display.

Os workers incrementam contadores de forma concorrente; o display apenas lê.
Cada contador tem o seu próprio lock para escrita e uma leitura sem lock
(o valor observado pode estar ligeiramente atrasado, o que é aceitável
para exibição).
"""

import threading
import logging

logger = logging.getLogger(__name__)

# ========================
# 0. Nomes dos contadores
# ========================

PRIMARY_FIELD = "mutations"

FIELD_NAMES = (
    PRIMARY_FIELD,
    "crashes",
    "unique_crashes",
    "blacklisted_crashes",
    "verified_crashes",
    "timeouts",
    "dynamic_file_best_size",
    "dynamic_file_iter_expire",
    # contadores de hardware (perf)
    "cpu_instructions",
    "cpu_branches",
    "bts_blocks",
    "bts_edges",
    "ipt_blocks",
    "custom",
    # sanitizer coverage
    "sancov_hit_bb",
    "sancov_total_bb",
    "sancov_dso",
    "sancov_new_bb",
    "sancov_crashes",
)


# ========================
# 1. Contador atômico
# ========================


class AtomicCounter:
    """Inteiro não negativo incrementado por várias threads.

    `add` serializa escritores com um lock próprio; `load` lê o valor sem
    bloquear.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0):
        self._value = int(value)
        self._lock = threading.Lock()

    def add(self, n: int = 1) -> int:
        """Incrementa o contador em `n` e devolve o novo valor."""
        with self._lock:
            self._value += n
            return self._value

    def store(self, value: int) -> None:
        """Substitui o valor (usado para gauges como o melhor tamanho de ficheiro)."""
        with self._lock:
            self._value = int(value)

    def load(self) -> int:
        return self._value


class CounterSet:
    """Conjunto nomeado de `AtomicCounter`, um por métrica de `FIELD_NAMES`."""

    def __init__(self, **initial: int):
        self._counters: dict[str, AtomicCounter] = {name: AtomicCounter() for name in FIELD_NAMES}
        for name, value in initial.items():
            self.counter(name).store(value)

    def counter(self, name: str) -> AtomicCounter:
        """Retorna o contador `name`; KeyError para nomes desconhecidos."""
        return self._counters[name]

    def increment(self, name: str, n: int = 1) -> int:
        """Ponto de entrada dos workers para incrementar uma métrica."""
        return self._counters[name].add(n)



# ========================
# 2. Adaptador de leitura (lado do display)
# ========================


class CounterSource:
    """Fonte de leitura usada pelo display.

    `read_field` nunca bloqueia e nunca falha: campos ausentes ou valores
    inválidos resultam em 0.
    """

    def __init__(self, counters: CounterSet | None):
        self._counters = counters

    def read_field(self, name: str) -> int:
        """Lê o valor atual de `name` sem lock."""
        if self._counters is None:
            return 0
        try:
            value = self._counters.counter(name).load()
        except (KeyError, AttributeError):
            return 0
        if not isinstance(value, int) or value < 0:
            logger.debug("read_field: valor inválido para %s: %r", name, value)
            return 0
        return value
