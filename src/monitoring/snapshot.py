"""Snapshot pontual dos contadores para um único ciclo de display."""

from dataclasses import dataclass, fields

from .counters import CounterSource


@dataclass(frozen=True)
class Snapshot:
    """Leitura de todos os contadores num ciclo.

    Cada campo é lido individualmente; o conjunto não é transacional.
    """

    mutations: int = 0
    crashes: int = 0
    unique_crashes: int = 0
    blacklisted_crashes: int = 0
    verified_crashes: int = 0
    timeouts: int = 0
    dynamic_file_best_size: int = 0
    dynamic_file_iter_expire: int = 0
    cpu_instructions: int = 0
    cpu_branches: int = 0
    bts_blocks: int = 0
    bts_edges: int = 0
    ipt_blocks: int = 0
    custom: int = 0
    sancov_hit_bb: int = 0
    sancov_total_bb: int = 0
    sancov_dso: int = 0
    sancov_new_bb: int = 0
    sancov_crashes: int = 0


def take_snapshot(source: CounterSource) -> Snapshot:
    """Lê cada campo de `source` e devolve um `Snapshot`."""
    return Snapshot(**{f.name: source.read_field(f.name) for f in fields(Snapshot)})
