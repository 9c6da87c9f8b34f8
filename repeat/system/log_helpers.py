"""Helpers de baixo nível para os ficheiros de debug.

Fornece escrita com lock exclusivo (portalocker) e fsync opcional,
serialização JSONL e normalização de nomes/datas. Vários processos repeat
podem partilhar a mesma raiz de logs, daí o lock por escrita.
"""

from pathlib import Path
import os
from datetime import datetime, timezone, date
import logging
import json as _json
import re

import portalocker

logger = logging.getLogger(__name__)


# -----------------------
# Escrita segura
# -----------------------
def write_text(path: Path, text: str, durable: bool = True) -> None:
    """Anexe texto a `path` de forma segura, usando lock e fsync.

    Cria o diretório pai quando necessário e aplica um lock exclusivo
    durante a escrita. Falhas de I/O são registadas e não propagam.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            locked = False
            try:
                try:
                    portalocker.lock(fh, portalocker.LOCK_EX)
                    locked = True
                except Exception as exc:
                    logger.debug("write_text: portalocker.lock falhou em %s: %s", path, exc)

                fh.write(text)
                fh.flush()

                if durable:
                    try:
                        os.fsync(fh.fileno())
                    except OSError as exc:
                        logger.debug("write_text: fsync falhou em %s: %s", path, exc)
            finally:
                if locked:
                    try:
                        portalocker.unlock(fh)
                    except Exception as exc:
                        logger.debug("write_text: portalocker.unlock falhou em %s: %s", path, exc)
    except OSError as exc:
        logger.debug("write_text: falhou em %s: %s", path, exc, exc_info=True)


def write_json(path: Path, obj: dict, durable: bool = True) -> None:
    """Serialize um objeto como JSONL e anexe ao ficheiro `path`.

    Objetos não serializáveis por padrão usam `default=str` como fallback.
    """
    try:
        line = _json.dumps(obj, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        logger.debug("write_json: fallback default=str usado em %s: %s", path, exc)
        line = _json.dumps(obj, ensure_ascii=False, default=str) + "\n"
    write_text(path, line, durable=durable)


# -----------------------
# Normalização e formatação
# -----------------------
def sanitize_log_name(raw_name: str, fallback: str = "debug_log") -> str:
    """Sanitize o nome base de um ficheiro de log para uso seguro no filesystem.

    Remove caracteres potencialmente perigosos e limita o comprimento.
    """
    rn = Path(raw_name or fallback).name.lstrip(".")
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", rn)
    if not name:
        name = fallback
    if len(name) > 200:
        name = name[:200]
    return name


def build_json_entry(ts: str, level: str, msg, extra: dict | None = None) -> dict:
    """Construa um dicionário pronto para ser serializado em JSONL.

    Insere campos `ts`, `level`, `msg` e mescla `extra` quando fornecido;
    chaves em colisão recebem o prefixo ``extra_``.
    """
    entry = {"ts": ts, "level": level, "msg": msg}
    if extra and isinstance(extra, dict):
        for k, v in extra.items():
            entry[k if k not in entry else f"extra_{k}"] = v
    elif extra:
        entry["meta"] = extra
    return entry


def format_date_for_log(dt=None) -> str:
    """Retorna data no formato YYYY-MM-DD (segura para nomes)."""
    try:
        if dt is None:
            return date.today().isoformat()
        if isinstance(dt, datetime):
            return dt.date().isoformat()
        if isinstance(dt, date):
            return dt.isoformat()
        return dt.date().isoformat()
    except (AttributeError, TypeError):
        return datetime.now(timezone.utc).date().isoformat()


# -----------------------
# Diretórios / permissões
# -----------------------
def ensure_dir_writable(p: Path) -> bool:
    """Garante, em melhor esforço, que `p` existe e é gravável."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.debug("ensure_dir_writable: falha ao criar %s: %s", p, exc)
        return False
    return os.access(p, os.W_OK)
