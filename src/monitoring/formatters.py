"""Formatação do relatório de telemetria para o terminal.

Transforma um `Snapshot` e o `RenderConfig` numa sequência ordenada de
secções de texto. Cada secção tem um predicado próprio; a ordem é fixa e
definida por `SECTIONS`.
"""

from typing import Callable, NamedTuple
import logging

from ..config.settings import (
    DYNFILE_BRANCH_COUNT,
    DYNFILE_BTS_BLOCK,
    DYNFILE_BTS_EDGE,
    DYNFILE_CUSTOM,
    DYNFILE_INSTR_COUNT,
    DYNFILE_IPT_BLOCK,
    DYNFILE_NONE,
    RenderConfig,
)
from ..system.time_helpers import format_local_time
from .rate import average_rate, clamp_iterations
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

ESC_CLEAR = "\033[H\033[2J"
ESC_BOLD = "\033[1m"
ESC_RESET = "\033[0m"

STAT_BANNER = "============================== STAT ==============================\n"
LOGS_BANNER = "============================== LOGS ==============================\n"


class ReportContext(NamedTuple):
    """Dados de um ciclo passados a cada secção."""

    snapshot: Snapshot
    config: RenderConfig
    elapsed: int
    rate: int


class Section(NamedTuple):
    name: str
    predicate: Callable[[ReportContext], bool]
    builder: Callable[[ReportContext], str]


# ========================
# 0. Helpers de formatação
# ========================


def bold(value) -> str:
    """Envolve `value` nas sequências ANSI de negrito/reset."""
    return f"{ESC_BOLD}{value}{ESC_RESET}"


def coverage_percent(hit: int, total: int) -> int:
    """Percentagem inteira (truncada) de blocos atingidos; 0 quando total é 0."""
    if total <= 0:
        return 0
    pct = (hit * 100) // total
    return max(0, min(100, pct))


# ========================
# 1. Secções
# ========================


def _always(_ctx: ReportContext) -> bool:
    return True


def _header(_ctx: ReportContext) -> str:
    return ESC_CLEAR + STAT_BANNER


def _core(ctx: ReportContext) -> str:
    cfg = ctx.config
    total = clamp_iterations(ctx.snapshot.mutations, cfg.mutations_max)
    lines = [f"Iterations: {bold(total)}"]
    if cfg.mutations_max:
        lines[0] += f" (out of: {bold(cfg.mutations_max)})"
    lines.append(
        f"Start time: {bold(format_local_time(cfg.time_start))} ({bold(ctx.elapsed)} seconds elapsed)"
    )
    lines.append(f"Input file/dir: '{bold(cfg.input_file)}'")
    lines.append(f"Fuzzed cmd: '{bold(cfg.cmdline)}'")
    if cfg.pid > 0:
        lines.append(f"Remote cmd [{bold(cfg.pid)}]: '{bold(cfg.pid_cmd)}'")
    lines.append(f"Fuzzing threads: {bold(cfg.threads)}")
    lines.append(f"Execs per second: {bold(ctx.rate)} (avg: {bold(average_rate(total, ctx.elapsed))})")
    return "\n".join(lines) + "\n"


# Dry run: sem mutações e com verifier ativo
def _is_dry_run(ctx: ReportContext) -> bool:
    return ctx.config.flip_rate == 0.0 and ctx.config.use_verifier


def _dry_run(ctx: ReportContext) -> str:
    return f"Input Files: '{bold(ctx.config.file_cnt)}'\n"


def _outcomes(ctx: ReportContext) -> str:
    s = ctx.snapshot
    return (
        f"Crashes: {bold(s.crashes)} (unique: {bold(s.unique_crashes)}, "
        f"blacklist: {bold(s.blacklisted_crashes)}, verified: {bold(s.verified_crashes)}) \n"
        f"Timeouts: {bold(s.timeouts)}\n"
    )


def _has_feedback(ctx: ReportContext) -> bool:
    return ctx.config.dynfile_method != DYNFILE_NONE or ctx.config.use_sancov


def _dynamic_feedback(ctx: ReportContext) -> str:
    s, cfg = ctx.snapshot, ctx.config
    return (
        f"Dynamic file size: {bold(s.dynamic_file_best_size)} (max: {bold(cfg.max_file_sz)})\n"
        f"Dynamic file max iterations keep for chosen seed "
        f"({bold(s.dynamic_file_iter_expire)}/{bold(cfg.max_dynfile_iter)})\n"
        "Coverage (max):\n"
    )


def _method_bit(bit: int) -> Callable[[ReportContext], bool]:
    def _predicate(ctx: ReportContext) -> bool:
        return bool(ctx.config.dynfile_method & bit)

    return _predicate


def _counter_line(label: str, field: str) -> Callable[[ReportContext], str]:
    def _builder(ctx: ReportContext) -> str:
        return f"  - {label}{bold(getattr(ctx.snapshot, field))}\n"

    return _builder


def _uses_sancov(ctx: ReportContext) -> bool:
    return ctx.config.use_sancov


def _sancov(ctx: ReportContext) -> str:
    s = ctx.snapshot
    pct = coverage_percent(s.sancov_hit_bb, s.sancov_total_bb)
    return (
        f"  - total hit #bb:  {bold(s.sancov_hit_bb)} (coverage {pct}%)\n"
        f"  - total #dso:     {bold(s.sancov_dso)} (instrumented only)\n"
        f"  - discovered #bb: {bold(s.sancov_new_bb)} (new from input seed)\n"
        f"  - crashes:        {bold(s.sancov_crashes)}\n"
    )


def _footer(_ctx: ReportContext) -> str:
    return LOGS_BANNER


SECTIONS: tuple = (
    Section("header", _always, _header),
    Section("core", _always, _core),
    Section("dry_run", _is_dry_run, _dry_run),
    Section("outcomes", _always, _outcomes),
    Section("dynamic_feedback", _has_feedback, _dynamic_feedback),
    Section("hw_instructions", _method_bit(DYNFILE_INSTR_COUNT), _counter_line("cpu instructions:      ", "cpu_instructions")),
    Section("hw_branches", _method_bit(DYNFILE_BRANCH_COUNT), _counter_line("cpu branches:          ", "cpu_branches")),
    Section("hw_bts_blocks", _method_bit(DYNFILE_BTS_BLOCK), _counter_line("BTS unique blocks: ", "bts_blocks")),
    Section("hw_bts_edges", _method_bit(DYNFILE_BTS_EDGE), _counter_line("BTS unique edges:   ", "bts_edges")),
    Section("hw_ipt_blocks", _method_bit(DYNFILE_IPT_BLOCK), _counter_line("PT unique blocks: ", "ipt_blocks")),
    Section("hw_custom", _method_bit(DYNFILE_CUSTOM), _counter_line("custom counter:        ", "custom")),
    Section("sancov", _uses_sancov, _sancov),
    Section("footer", _always, _footer),
)


# ========================
# 2. API pública
# ========================


def enabled_sections(snapshot: Snapshot, config: RenderConfig, elapsed: int = 0, rate: int = 0) -> list[str]:
    """Nomes das secções cujo predicado passa, na ordem do pipeline."""
    ctx = ReportContext(snapshot, config, elapsed, rate)
    return [sec.name for sec in SECTIONS if sec.predicate(ctx)]


def build_report(snapshot: Snapshot, config: RenderConfig, elapsed: int, rate: int) -> list[str]:
    """Constrói as secções de texto do relatório, por ordem fixa.

    Função pura: depende apenas dos argumentos.
    """
    ctx = ReportContext(snapshot, config, int(elapsed), int(rate))
    return [sec.builder(ctx) for sec in SECTIONS if sec.predicate(ctx)]
