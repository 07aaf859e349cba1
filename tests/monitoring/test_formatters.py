import pytest

import src.monitoring.formatters as formatters
from src.config.settings import (
    DYNFILE_BRANCH_COUNT,
    DYNFILE_BTS_BLOCK,
    DYNFILE_BTS_EDGE,
    DYNFILE_CUSTOM,
    DYNFILE_INSTR_COUNT,
    DYNFILE_IPT_BLOCK,
    RenderConfig,
)
from src.monitoring.formatters import ESC_CLEAR, LOGS_BANNER, STAT_BANNER, bold, build_report, enabled_sections
from src.monitoring.snapshot import Snapshot

ALWAYS = ["header", "core", "outcomes", "footer"]


def _cfg(**kw):
    kw.setdefault("time_start", 1_700_000_000.0)
    return RenderConfig(**kw)


def _text(snapshot, config, elapsed=0, rate=0):
    return "".join(build_report(snapshot, config, elapsed, rate))


def test_minimal_report_has_only_fixed_sections():
    """Sem grupos opcionais só aparecem header, core, outcomes e footer."""
    assert enabled_sections(Snapshot(), _cfg()) == ALWAYS
    sections = build_report(Snapshot(), _cfg(), 0, 0)
    assert sections[0] == ESC_CLEAR + STAT_BANNER
    assert sections[-1] == LOGS_BANNER
    assert len(sections) == 4


def test_iterations_clamped_to_maximum_with_average():
    """maximum=100, bruto 150, elapsed 10 -> '100 (out of: 100)' e média 10."""
    text = _text(Snapshot(mutations=150), _cfg(mutations_max=100), elapsed=10, rate=7)
    assert f"Iterations: {bold(100)} (out of: {bold(100)})\n" in text
    assert f"Execs per second: {bold(7)} (avg: {bold(10)})" in text


def test_iterations_without_maximum_has_no_suffix():
    """Sem máximo configurado não há sufixo '(out of: N)'."""
    text = _text(Snapshot(mutations=150), _cfg(), elapsed=0)
    assert f"Iterations: {bold(150)}\n" in text
    assert "out of" not in text
    # elapsed 0 -> média 0
    assert f"(avg: {bold(0)})" in text


def test_core_section_fields(monkeypatch):
    """Core mostra hora de início, elapsed, input, comando e threads."""
    monkeypatch.setattr(formatters, "format_local_time", lambda ts: "2024-01-02 03:04:05")
    text = _text(Snapshot(), _cfg(input_file="/corpus", cmdline="./target ___FILE___", threads=4), elapsed=12)
    assert f"Start time: {bold('2024-01-02 03:04:05')} ({bold(12)} seconds elapsed)" in text
    assert f"Input file/dir: '{bold('/corpus')}'" in text
    assert f"Fuzzed cmd: '{bold('./target ___FILE___')}'" in text
    assert f"Fuzzing threads: {bold(4)}" in text
    assert "Remote cmd" not in text


def test_remote_cmd_only_when_pid_positive():
    """A linha do processo remoto aparece apenas para pid > 0."""
    text = _text(Snapshot(), _cfg(pid=321, pid_cmd="/usr/bin/server -p 80"))
    assert f"Remote cmd [{bold(321)}]: '{bold('/usr/bin/server -p 80')}'" in text


@pytest.mark.parametrize(
    "flip_rate,use_verifier,expected",
    [(0.0, True, True), (0.0, False, False), (0.5, True, False)],
)
def test_dry_run_gating(flip_rate, use_verifier, expected):
    """Input Files só aparece com flip_rate == 0 e verifier ativo."""
    cfg = _cfg(flip_rate=flip_rate, use_verifier=use_verifier, file_cnt=9)
    assert ("dry_run" in enabled_sections(Snapshot(), cfg)) is expected
    assert (f"Input Files: '{bold(9)}'" in _text(Snapshot(), cfg)) is expected


def test_outcome_stats():
    """Crashes e timeouts sempre presentes."""
    snap = Snapshot(crashes=5, unique_crashes=2, blacklisted_crashes=1, verified_crashes=3, timeouts=4)
    text = _text(snap, _cfg())
    assert (
        f"Crashes: {bold(5)} (unique: {bold(2)}, blacklist: {bold(1)}, verified: {bold(3)}) \n" in text
    )
    assert f"Timeouts: {bold(4)}\n" in text


def test_dynamic_feedback_section():
    """Secção de feedback aparece com método dynfile ou sancov."""
    snap = Snapshot(dynamic_file_best_size=512, dynamic_file_iter_expire=17)
    cfg = _cfg(dynfile_method=DYNFILE_INSTR_COUNT, max_file_sz=4096, max_dynfile_iter=8192)
    text = _text(snap, cfg)
    assert f"Dynamic file size: {bold(512)} (max: {bold(4096)})" in text
    assert f"({bold(17)}/{bold(8192)})" in text
    assert "Coverage (max):\n" in text
    assert "dynamic_feedback" in enabled_sections(snap, _cfg(use_sancov=True))
    assert "dynamic_feedback" not in enabled_sections(snap, _cfg())


@pytest.mark.parametrize(
    "bit,name,label,field",
    [
        (DYNFILE_INSTR_COUNT, "hw_instructions", "cpu instructions:", "cpu_instructions"),
        (DYNFILE_BRANCH_COUNT, "hw_branches", "cpu branches:", "cpu_branches"),
        (DYNFILE_BTS_BLOCK, "hw_bts_blocks", "BTS unique blocks:", "bts_blocks"),
        (DYNFILE_BTS_EDGE, "hw_bts_edges", "BTS unique edges:", "bts_edges"),
        (DYNFILE_IPT_BLOCK, "hw_ipt_blocks", "PT unique blocks:", "ipt_blocks"),
        (DYNFILE_CUSTOM, "hw_custom", "custom counter:", "custom"),
    ],
)
def test_each_hw_counter_gated_by_its_bit(bit, name, label, field):
    """Cada contador de hardware depende apenas do seu bit."""
    snap = Snapshot(**{field: 1234})
    names = enabled_sections(snap, _cfg(dynfile_method=bit))
    hw = [n for n in names if n.startswith("hw_")]
    assert hw == [name]
    text = _text(snap, _cfg(dynfile_method=bit))
    assert label in text and bold(1234) in text


def test_block_and_edge_labels_are_distinct():
    """Blocos e arestas BTS usam rótulos distintos conforme o bit."""
    blocks = _text(Snapshot(bts_blocks=1), _cfg(dynfile_method=DYNFILE_BTS_BLOCK))
    edges = _text(Snapshot(bts_edges=1), _cfg(dynfile_method=DYNFILE_BTS_EDGE))
    assert "unique blocks" in blocks and "unique edges" not in blocks
    assert "unique edges" in edges and "unique blocks" not in edges


def test_sancov_section_and_coverage():
    """Linhas de sanitizer coverage com percentagem truncada."""
    snap = Snapshot(sancov_hit_bb=1, sancov_total_bb=3, sancov_dso=2, sancov_new_bb=5, sancov_crashes=6)
    text = _text(snap, _cfg(use_sancov=True))
    assert f"total hit #bb:  {bold(1)} (coverage 33%)" in text
    assert f"total #dso:     {bold(2)} (instrumented only)" in text
    assert f"discovered #bb: {bold(5)} (new from input seed)" in text
    assert f"  - crashes:        {bold(6)}\n" in text


def test_sancov_zero_total_blocks_is_zero_percent():
    """total=0 e hit=5 -> cobertura 0, sem erro."""
    text = _text(Snapshot(sancov_hit_bb=5, sancov_total_bb=0), _cfg(use_sancov=True))
    assert "(coverage 0%)" in text


@pytest.mark.parametrize("hit,total,expected", [(0, 0, 0), (5, 0, 0), (1, 3, 33), (3, 3, 100), (10, 3, 100), (2, 200, 1)])
def test_coverage_percent_bounds(hit, total, expected):
    """coverage_percent fica sempre em [0, 100]."""
    assert formatters.coverage_percent(hit, total) == expected


def test_full_pipeline_order():
    """Com tudo ativo as secções seguem a ordem fixa do pipeline."""
    cfg = _cfg(
        flip_rate=0.0,
        use_verifier=True,
        dynfile_method=(
            DYNFILE_INSTR_COUNT
            | DYNFILE_BRANCH_COUNT
            | DYNFILE_BTS_BLOCK
            | DYNFILE_BTS_EDGE
            | DYNFILE_IPT_BLOCK
            | DYNFILE_CUSTOM
        ),
        use_sancov=True,
    )
    assert enabled_sections(Snapshot(), cfg) == [sec.name for sec in formatters.SECTIONS]
    text = _text(Snapshot(), cfg)
    markers = ["STAT", "Iterations", "Input Files", "Crashes", "Dynamic file size", "cpu instructions", "total hit #bb", "LOGS"]
    positions = [text.index(m) for m in markers]
    assert positions == sorted(positions)


def test_numbers_are_bold_wrapped():
    """Valores numéricos são envolvidos por negrito/reset."""
    text = _text(Snapshot(timeouts=77), _cfg())
    assert "\033[1m77\033[0m" in text
