import importlib
import logging


settings_mod = importlib.import_module("repeat.config.settings")


def test_load_settings_defaults():
    """Sem variáveis REPEAT_* os valores padrão são usados."""
    s = settings_mod.load_settings(env={})
    assert s == settings_mod.DEFAULTS
    # DEFAULTS não é alterado pelo carregamento
    assert s is not settings_mod.DEFAULTS


def test_load_settings_env_overrides():
    """Variáveis de ambiente sobrescrevem os padrões."""
    env = {
        "REPEAT_LOG_LEVEL": "debug",
        "REPEAT_LOG_ROOT": "/tmp/repeat-logs",
        "REPEAT_SHELL": "/bin/bash",
        "REPEAT_DURABLE_WRITES": "off",
    }
    s = settings_mod.load_settings(env=env)
    assert s["log_level"] == "DEBUG"
    assert s["log_root"] == "/tmp/repeat-logs"
    assert s["shell"] == "/bin/bash"
    assert s["durable_writes"] is False


def test_load_settings_invalid_values_are_ignored(caplog):
    """Valores inválidos geram aviso e mantêm o padrão."""
    caplog.set_level(logging.WARNING)
    env = {
        "REPEAT_LOG_LEVEL": "loud",
        "REPEAT_DURABLE_WRITES": "maybe",
        "REPEAT_SHELL": "   ",
        "REPEAT_LOG_ROOT": "",
    }
    s = settings_mod.load_settings(env=env)
    assert s["log_level"] == "WARNING"
    assert s["durable_writes"] is True
    assert s["shell"] == "/bin/sh"
    assert s["log_root"] is None
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "REPEAT_LOG_LEVEL" in messages
    assert "REPEAT_DURABLE_WRITES" in messages


def test_load_settings_from_env_file(tmp_path):
    """REPEAT_ENV_FILE carrega um .env; o ambiente tem precedência."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comentário\n"
        "export REPEAT_SHELL=/bin/dash\n"
        "REPEAT_LOG_LEVEL='info'\n"
        "REPEAT_LOG_ROOT=/from/file  # inline\n",
        encoding="utf-8",
    )
    s = settings_mod.load_settings(env={"REPEAT_ENV_FILE": str(env_file), "REPEAT_LOG_LEVEL": "ERROR"})
    assert s["shell"] == "/bin/dash"
    assert s["log_root"] == "/from/file"
    assert s["log_level"] == "ERROR"


def test_load_settings_missing_env_file_warns(tmp_path, caplog):
    """Ficheiro .env inexistente apenas gera aviso."""
    caplog.set_level(logging.WARNING)
    s = settings_mod.load_settings(env={"REPEAT_ENV_FILE": str(tmp_path / "nope.env")})
    assert s == settings_mod.DEFAULTS
    assert any("REPEAT_ENV_FILE" in r.getMessage() for r in caplog.records)


def test_load_settings_reads_process_environment(monkeypatch):
    """Sem argumento, os.environ é usado."""
    monkeypatch.setenv("REPEAT_SHELL", "/usr/bin/zsh")
    assert settings_mod.load_settings()["shell"] == "/usr/bin/zsh"
