# conftest.py
# Configuração global para pytest: isola variáveis REPEAT_* e fornece scripts auxiliares
import os
import stat
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_repeat_env(monkeypatch):
    """Remove variáveis REPEAT_* do ambiente para cada teste."""
    for key in list(os.environ):
        if key.startswith("REPEAT_"):
            monkeypatch.delenv(key, raising=False)


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def make_counter(tmp_path):
    """Cria um script que conta as invocações num ficheiro.

    ``make_counter(target=3, hit=7, miss=0)`` devolve ``(script, counter)``:
    o script sai com ``hit`` na invocação ``target`` e com ``miss`` nas
    restantes. ``target=None`` sai sempre com ``miss``.
    """
    created = {"n": 0}

    def _make(target=None, hit=0, miss=0, extra=""):
        created["n"] += 1
        counter = tmp_path / f"count-{created['n']}"
        script = tmp_path / f"counter-{created['n']}.sh"
        body = (
            f"n=0\n"
            f"[ -f '{counter}' ] && n=$(cat '{counter}')\n"
            f"n=$((n + 1))\n"
            f"echo \"$n\" > '{counter}'\n"
            f"{extra}"
        )
        if target is not None:
            body += f'if [ "$n" -eq {int(target)} ]; then exit {int(hit)}; fi\n'
        body += f"exit {int(miss)}\n"
        return _write_script(script, body), counter

    return _make


@pytest.fixture
def read_count():
    """Lê o número de invocações gravado por um script de ``make_counter``."""

    def _read(counter: Path) -> int:
        if not counter.exists():
            return 0
        return int(counter.read_text(encoding="utf-8").strip() or 0)

    return _read


@pytest.fixture
def make_script(tmp_path):
    """Cria um script /bin/sh executável com o corpo indicado."""

    def _make(name: str, body: str) -> Path:
        return _write_script(tmp_path / name, body)

    return _make
