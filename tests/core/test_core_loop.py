import importlib
import threading
from types import SimpleNamespace

core = importlib.import_module("src.core.core")


def _fake_state():
    return SimpleNamespace(last_sections=[], ticks=0)


def test_run_loop_runs_requested_cycles(monkeypatch):
    """Teste para execução de um número fixo de ciclos."""
    calls = []
    monkeypatch.setattr("src.core.core._display.display_tick", lambda s: calls.append(s) or True)
    monkeypatch.setattr("src.core.core.write_log", lambda *a, **k: None)
    st = _fake_state()

    assert core.run_loop(st, interval=0, cycles=3) == 3
    assert calls == [st, st, st]


def test_run_loop_survives_tick_errors(monkeypatch):
    """Exceções ou falhas do tick não interrompem o loop."""
    results = iter([RuntimeError("boom"), False, True])

    def tick(_s):
        r = next(results)
        if isinstance(r, Exception):
            raise r
        return r

    monkeypatch.setattr("src.core.core._display.display_tick", tick)
    monkeypatch.setattr("src.core.core.write_log", lambda *a, **k: None)
    assert core.run_loop(_fake_state(), interval=0, cycles=3) == 3


def test_run_loop_stops_on_event(monkeypatch):
    """stop_event definido termina o loop infinito."""
    ev = threading.Event()
    count = {"n": 0}

    def tick(_s):
        count["n"] += 1
        if count["n"] == 2:
            ev.set()
        return True

    monkeypatch.setattr("src.core.core._display.display_tick", tick)
    monkeypatch.setattr("src.core.core.write_log", lambda *a, **k: None)
    assert core.run_loop(_fake_state(), interval=0.01, cycles=0, stop_event=ev) == 2


def test_run_loop_keyboard_interrupt(monkeypatch):
    """KeyboardInterrupt encerra o loop sem propagar."""

    def tick(_s):
        raise KeyboardInterrupt

    monkeypatch.setattr("src.core.core._display.display_tick", tick)
    monkeypatch.setattr("src.core.core.write_log", lambda *a, **k: None)
    assert core.run_loop(_fake_state(), interval=0, cycles=0) == 0


def test_final_summary_written(monkeypatch):
    """Ao terminar grava um resumo sem ANSI através de write_log."""
    written = {}

    def fake_write_log(name, level, message, **kwargs):
        written.update(name=name, level=level, msg=message, extra=kwargs.get("extra"))

    monkeypatch.setattr("src.core.core._display.display_tick", lambda s: True)
    monkeypatch.setattr("src.core.core.write_log", fake_write_log)
    st = SimpleNamespace(
        last_sections=["\033[H\033[2J=== STAT ===\n", "Iterations: \033[1m5\033[0m\n", "Timeouts: \033[1m1\033[0m\n", "=== LOGS ===\n"],
        ticks=1,
    )
    core.run_loop(st, interval=0, cycles=1)
    assert written["name"] == "telemetry"
    assert written["msg"] == "Iterations: 5 | Timeouts: 1"
    assert written["extra"] == {"ticks": 1}


def test_final_summary_errors_swallowed(monkeypatch):
    """Falha ao gravar o resumo final não propaga."""
    monkeypatch.setattr("src.core.core._display.display_tick", lambda s: True)
    monkeypatch.setattr(
        "src.core.core.write_log", lambda *a, **k: (_ for _ in ()).throw(OSError("disk full"))
    )
    st = SimpleNamespace(last_sections=["h", "Iterations: 1\n", "f"], ticks=1)
    assert core.run_loop(st, interval=0, cycles=1) == 1


def test_final_summary_uses_log_root(monkeypatch, tmp_path):
    """O resumo final vai para a raiz de logs recebida pelo loop."""
    seen = {}

    def fake_write_log(name, level, message, **kwargs):
        seen["root"] = kwargs.get("root")

    monkeypatch.setattr("src.core.core._display.display_tick", lambda s: True)
    monkeypatch.setattr("src.core.core.write_log", fake_write_log)
    st = SimpleNamespace(last_sections=["h", "Iterations: 1\n", "f"], ticks=1)
    core.run_loop(st, interval=0, cycles=1, log_root=tmp_path / "custom")
    assert seen["root"] == tmp_path / "custom"
