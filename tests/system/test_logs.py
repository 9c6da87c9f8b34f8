import json
import logging
import sys
from datetime import date

from repeat.system import logs


def test_get_log_paths_creates_dirs(tmp_path):
    """get_log_paths cria raiz, debug/ e json/."""
    paths = logs.get_log_paths(tmp_path / "root")
    assert paths.root == tmp_path / "root"
    assert paths.debug_dir.is_dir()
    assert paths.json_dir.is_dir()


def test_daily_file_paths(tmp_path):
    """Ficheiros diários de texto e JSONL ficam nos subdiretórios certos."""
    today = date.today().isoformat()
    assert logs.get_debug_file_path(tmp_path) == tmp_path / "debug" / f"debug_log-{today}.txt"
    assert logs.get_json_file_path(tmp_path) == tmp_path / "json" / f"repeat-{today}.jsonl"
    assert logs.get_json_file_path(tmp_path, "../evil name").name == f"evil_name-{today}.jsonl"


def _record(msg, level=logging.INFO, exc_info=None):
    return logging.LogRecord("repeat.test", level, __file__, 1, msg, (), exc_info)


def test_jsonl_handler_writes_one_line_per_record(tmp_path):
    """Cada registo vira uma linha JSON com ts, level, msg, name e pid."""
    path = tmp_path / "out.jsonl"
    handler = logs.JSONLHandler(path, durable=False)
    handler.handle(_record("primeiro"))
    handler.handle(_record("segundo", logging.WARNING))
    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [e["msg"] for e in entries] == ["primeiro", "segundo"]
    assert entries[1]["level"] == "WARNING"
    assert entries[0]["name"] == "repeat.test"
    assert isinstance(entries[0]["pid"], int)
    assert entries[0]["ts"].endswith("Z")
    assert "exc" not in entries[0]
    assert handler.baseFilename == str(path)


def test_jsonl_handler_includes_traceback(tmp_path):
    handler = logs.JSONLHandler(tmp_path / "out.jsonl")
    try:
        raise ValueError("falhou")
    except ValueError:
        entry = handler.to_entry(_record("erro", logging.ERROR, sys.exc_info()))
    assert "ValueError: falhou" in entry["exc"]


def test_jsonl_handler_respects_level(tmp_path):
    """O nível do handler filtra registos quando ligado a um logger."""
    path = tmp_path / "out.jsonl"
    handler = logs.JSONLHandler(path, durable=False, level=logging.WARNING)
    log = logging.getLogger("repeat.test.jsonl_level")
    log.setLevel(logging.DEBUG)
    log.propagate = False
    log.addHandler(handler)
    try:
        log.info("ignorado")
        assert not path.exists()
        log.warning("gravado")
    finally:
        log.removeHandler(handler)
    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [e["msg"] for e in entries] == ["gravado"]


def test_jsonl_handler_emit_errors_go_to_handle_error(tmp_path, monkeypatch):
    """Exceções na escrita são encaminhadas para handleError."""
    seen = []
    handler = logs.JSONLHandler(tmp_path / "out.jsonl")

    def boom(*a, **k):
        raise RuntimeError("disco cheio")

    monkeypatch.setattr(logs, "write_json", boom)
    monkeypatch.setattr(handler, "handleError", lambda record: seen.append(record.msg))
    handler.handle(_record("perdido"))
    assert seen == ["perdido"]
