"""Aritmética de tempo monotónico usada pelo loop de execução.

Os instantes e durações são representados por ``TimeSpec`` (segundos +
resto em nanossegundos), sempre normalizados para que ``0 <= nsec < 1e9``.
A soma é feita em inteiros, portanto não acumula deriva ao longo de muitas
iterações.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..errors import ClockError

logger = logging.getLogger(__name__)

NS_IN_SEC = 1_000_000_000

# time.sleep rejeita valores muito grandes; esperas longas são feitas em fatias
MAX_SLEEP_CHUNK = 86400.0
MAX_SLEEP_CHUNK_NS = int(MAX_SLEEP_CHUNK) * NS_IN_SEC


# ========================
# 1. Representação de tempo
# ========================


@dataclass(frozen=True, order=True)
# Instante monotónico ou duração; consumido por args (intervalo) e core (deadlines)
class TimeSpec:
    """Par (segundos, nanossegundos) normalizado.

    Use ``TimeSpec.normalized`` para construir a partir de componentes fora
    do intervalo; o construtor direto assume valores já normalizados.
    """

    sec: int = 0
    nsec: int = 0

    @classmethod
    def normalized(cls, sec: int, nsec: int) -> "TimeSpec":
        """Constrói um TimeSpec levando o excesso de ``nsec`` para ``sec``.

        Funciona também para ``nsec`` negativo (empresta de ``sec``).
        """
        carry, rest = divmod(int(nsec), NS_IN_SEC)
        return cls(int(sec) + carry, rest)

    @classmethod
    def from_ns(cls, ns: int) -> "TimeSpec":
        return cls.normalized(0, ns)

    def to_ns(self) -> int:
        return self.sec * NS_IN_SEC + self.nsec

    def is_zero(self) -> bool:
        return self.sec == 0 and self.nsec == 0

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __add__(self, other: "TimeSpec") -> "TimeSpec":
        if not isinstance(other, TimeSpec):
            return NotImplemented
        return TimeSpec.normalized(self.sec + other.sec, self.nsec + other.nsec)

    def __str__(self) -> str:
        return f"{self.sec}.{self.nsec:09d}s"


ZERO = TimeSpec(0, 0)


# ========================
# 2. Relógio monotónico e espera absoluta
# ========================


def monotonic_now() -> TimeSpec:
    """Lê o relógio monotónico.

    Levanta ``ClockError`` quando a leitura falha; o chamador trata como
    falha fatal de ambiente.
    """
    try:
        ns = time.monotonic_ns()
    except OSError as exc:
        raise ClockError(f"erro fatal ao ler o relógio: {exc}") from exc
    return TimeSpec.from_ns(ns)


def sleep_until(
    deadline: TimeSpec,
    *,
    clock: Callable[[], TimeSpec] = monotonic_now,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Dorme até o relógio monotónico alcançar ``deadline``.

    A espera é repetida até completar: um ``sleep`` interrompido ou que
    acorde cedo apenas recalcula o tempo restante. Deadlines no passado
    retornam de imediato.
    """
    while True:
        remaining = deadline.to_ns() - clock().to_ns()
        if remaining <= 0:
            return
        try:
            # limita em inteiros antes da conversão para float
            sleep(min(remaining, MAX_SLEEP_CHUNK_NS) / NS_IN_SEC)
        except InterruptedError:
            logger.debug("sleep_until: espera interrompida, retomando")
