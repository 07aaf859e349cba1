from types import SimpleNamespace
import pytest

from src.core import args as args_mod


def test_configure_argparser_defaults():
    """Teste para configuração de argumentos padrão do parser."""
    p = args_mod.configure_argparser()
    ns = p.parse_args([])
    assert ns.interval == 1.0
    assert ns.cycles == 0
    assert ns.workers == 0


def test_parse_args_and_validation(monkeypatch):
    """Teste para parsing e validação de argumentos."""
    for var in ("TELEMETRY_INTERVAL_SEC", "TELEMETRY_CYCLES", "TELEMETRY_WORKERS", "TELEMETRY_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    ns = args_mod.parse_args(["-i", "0.5", "-c", "2", "-w", "3", "-v"])
    assert ns.interval == 0.5
    assert ns.cycles == 2
    assert ns.workers == 3
    assert ns.verbose == 1


def test_env_overrides_only_defaults(monkeypatch):
    """Variáveis de ambiente aplicam-se apenas quando a CLI não define o valor."""
    monkeypatch.setenv("TELEMETRY_INTERVAL_SEC", "2.5")
    monkeypatch.setenv("TELEMETRY_CYCLES", "7")
    ns = args_mod.parse_args(["-c", "4"])
    assert ns.interval == 2.5
    assert ns.cycles == 4


def test_invalid_env_is_ignored(monkeypatch, caplog):
    """Valor inválido no ambiente gera warning e mantém o default."""
    monkeypatch.setenv("TELEMETRY_CYCLES", "abc")
    ns = args_mod.parse_args([])
    assert ns.cycles == 0
    assert any("TELEMETRY_CYCLES" in r.message for r in caplog.records)


def test_validate_args_errors():
    """Teste para validação de erros em argumentos."""
    ns = SimpleNamespace(interval="bad", cycles=1, workers=0)
    with pytest.raises(ValueError):
        args_mod.validate_args(ns)
    ns2 = SimpleNamespace(interval=1.0, cycles=-1, workers=0)
    with pytest.raises(ValueError):
        args_mod.validate_args(ns2)
    ns3 = SimpleNamespace(interval=1.0, cycles=1, workers=-2)
    with pytest.raises(ValueError):
        args_mod.validate_args(ns3)


def test_get_log_config_levels():
    """Teste para obtenção de níveis de configuração de log."""
    ns = SimpleNamespace(log_level="debug", log_root=None, verbose=0)
    assert args_mod.get_log_config(ns)["level"] == "DEBUG"

    assert args_mod.get_log_config(SimpleNamespace(log_level=None, log_root=None, verbose=0))["level"] == "WARNING"
    assert args_mod.get_log_config(SimpleNamespace(log_level=None, log_root=None, verbose=1))["level"] == "INFO"
    assert args_mod.get_log_config(SimpleNamespace(log_level=None, log_root=None, verbose=2))["level"] == "DEBUG"

    cfg3 = args_mod.get_log_config(SimpleNamespace(log_level=None, log_root="/tmp", verbose=0))
    assert cfg3["root"] == "/tmp"
