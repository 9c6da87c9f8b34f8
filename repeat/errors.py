"""Exceções do repeat.

``UsageError`` e ``EarlyExit`` pertencem ao resolvedor de argumentos;
``FatalError`` e subclasses representam falhas de ambiente que encerram o
processo com status 1. Só ``repeat.main`` converte exceções em status de saída.
"""


class RepeatError(Exception):
    """Base para erros do repeat."""


class UsageError(RepeatError):
    """Argumentos inválidos na linha de comando."""


class EarlyExit(RepeatError):
    """Pedido para encerrar antes de executar qualquer comando (help, versão, uso)."""

    def __init__(self, status: int, message: str = "") -> None:
        super().__init__(message or f"exit {status}")
        self.status = status


class FatalError(RepeatError):
    """Falha de ambiente irrecuperável."""

    status = 1


class ClockError(FatalError):
    """Falha ao ler o relógio monotónico."""


class WaitError(FatalError):
    """Falha ao aguardar o processo filho (que não seja interrupção)."""


class LaunchError(FatalError):
    """Não foi possível criar o processo filho."""
