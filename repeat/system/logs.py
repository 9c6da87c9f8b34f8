"""Ficheiros de debug do repeat.

Resolve os caminhos sob a raiz de logs e fornece o handler JSONL que grava
cada evento de logging através de ``log_helpers.write_json`` (com lock).
"""

import logging
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .log_helpers import (
    build_json_entry,
    ensure_dir_writable,
    format_date_for_log,
    sanitize_log_name,
    write_json,
)

logger = logging.getLogger(__name__)

# ========================
# 0. Configuração padrão
# ========================

DEBUG_LOG_FILENAME = "debug_log"
JSON_LOG_FILENAME = "repeat"


# ========================
# 1. Diretórios e Paths
# ========================


@dataclass(frozen=True)
# Representa os diretórios usados pelos ficheiros de debug
class LogPaths:
    """Agrupa caminhos usados pelos ficheiros de debug."""

    root: Path
    debug_dir: Path
    json_dir: Path


def get_log_paths(root: str | Path) -> LogPaths:
    """Resolve a raiz de logs e garante os diretórios criados."""
    log_root = Path(root).expanduser()
    debug_dir = log_root / "debug"
    json_dir = log_root / "json"
    for p in (log_root, debug_dir, json_dir):
        if not ensure_dir_writable(p):
            logger.debug("get_log_paths: diretório sem escrita: %s", p)
    return LogPaths(log_root, debug_dir, json_dir)


# Retorna o caminho do ficheiro de debug do dia; usado pelo FileHandler de texto
def get_debug_file_path(root: str | Path) -> Path:
    """Retorna caminho do ficheiro de debug diário (texto)."""
    date_str = format_date_for_log(None)
    return get_log_paths(root).debug_dir / f"{DEBUG_LOG_FILENAME}-{date_str}.txt"


def get_json_file_path(root: str | Path, name: str = JSON_LOG_FILENAME) -> Path:
    """Retorna caminho do ficheiro JSONL diário."""
    date_str = format_date_for_log(None)
    base = sanitize_log_name(name, JSON_LOG_FILENAME)
    return get_log_paths(root).json_dir / f"{base}-{date_str}.jsonl"


# ========================
# 2. Handler JSONL
# ========================


class JSONLHandler(logging.Handler):
    """Handler que anexa cada registo como uma linha JSON.

    A escrita passa por ``write_json``, portanto usa lock exclusivo e fsync
    conforme ``durable``.
    """

    def __init__(self, path: Path, durable: bool = True, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.path = Path(path)
        self.baseFilename = str(self.path)
        self.durable = durable

    def to_entry(self, record: logging.LogRecord) -> dict:
        ts = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        extra = {"name": record.name, "pid": record.process}
        if record.exc_info:
            extra["exc"] = "".join(traceback.format_exception(*record.exc_info))
        return build_json_entry(ts, record.levelname, record.getMessage(), extra)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            write_json(self.path, self.to_entry(record), durable=self.durable)
        except Exception:
            self.handleError(record)
