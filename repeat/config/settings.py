"""Configurações ambientais do repeat.

Centraliza o nível de logging, a raiz dos ficheiros de debug, o shell usado
no modo shell e a durabilidade das escritas. Carrega ``DEFAULTS`` e permite
overrides via ficheiro ``.env`` (indicado por ``REPEAT_ENV_FILE``) ou
variáveis de ambiente com prefixo ``REPEAT_``. O ambiente sobrescreve o
``.env``.

Os parâmetros da execução (repetições, intervalo, flags e comando) vêm
apenas da linha de comando; ver ``repeat.core.args``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..system.helpers import merge_env_items

logger = logging.getLogger(__name__)

# ========================
# Constantes e padrões globais
# ========================

ENV_PREFIX = "REPEAT_"

DEFAULTS = {
    "log_level": "WARNING",
    "log_root": None,
    "shell": "/bin/sh",
    "durable_writes": True,
}

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


# ========================
# 1. Carregamento das configurações
# ========================


# Função principal do módulo; carrega todas as configurações do ambiente
def load_settings(env: dict | None = None) -> dict:
    """Carrega configurações combinando DEFAULTS + .env + ambiente.

    Retorna um dicionário com as chaves ``log_level``, ``log_root``,
    ``shell`` e ``durable_writes``. ``env`` substitui ``os.environ``
    (usado em testes).
    """
    process_env = os.environ if env is None else env
    env_file = process_env.get("REPEAT_ENV_FILE")
    if env_file:
        env_items = merge_env_items(Path(env_file), process_env)
        if not Path(env_file).exists():
            logger.warning("REPEAT_ENV_FILE aponta para ficheiro inexistente: %s", env_file)
    else:
        env_items = dict(process_env)

    settings = dict(DEFAULTS)
    _apply_log_level(env_items, settings)
    _apply_log_root(env_items, settings)
    _apply_shell(env_items, settings)
    _apply_durable_writes(env_items, settings)
    logger.debug("configurações carregadas: %s", settings)
    return settings


# ========================
# 2. Funções auxiliares de override
# ========================


def _apply_log_level(env_items: dict, settings: dict) -> None:
    raw = env_items.get("REPEAT_LOG_LEVEL")
    if raw is None or not str(raw).strip():
        return
    level = str(raw).strip().upper()
    if level not in _VALID_LEVELS:
        logger.warning("REPEAT_LOG_LEVEL inválido: %s", raw)
        return
    settings["log_level"] = level


def _apply_log_root(env_items: dict, settings: dict) -> None:
    raw = env_items.get("REPEAT_LOG_ROOT")
    if raw is None:
        return
    root = str(raw).strip()
    settings["log_root"] = root or None


def _apply_shell(env_items: dict, settings: dict) -> None:
    raw = env_items.get("REPEAT_SHELL")
    if raw is None or not str(raw).strip():
        return
    settings["shell"] = str(raw).strip()


def _apply_durable_writes(env_items: dict, settings: dict) -> None:
    raw = env_items.get("REPEAT_DURABLE_WRITES")
    if raw is None:
        return
    val = str(raw).strip().lower()
    if val in _TRUTHY:
        settings["durable_writes"] = True
    elif val in _FALSY:
        settings["durable_writes"] = False
    else:
        logger.warning("REPEAT_DURABLE_WRITES inválido: %s", raw)
