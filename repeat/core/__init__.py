"""Pacote core: resolução de argumentos e loop de execução.

Re-exports dos pontos de entrada usados por ``repeat.main``.
"""

from .args import LaunchMode, RunConfig, resolve_config
from .core import run_loop

__all__ = ["LaunchMode", "RunConfig", "resolve_config", "run_loop"]
