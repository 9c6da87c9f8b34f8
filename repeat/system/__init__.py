"""Pacote system: aritmética de tempo, helpers de ambiente e ficheiros de debug.

Re-exports úteis para o resto do pacote.
"""

from .time_helpers import TimeSpec, monotonic_now, sleep_until

__all__ = ["TimeSpec", "monotonic_now", "sleep_until"]
