"""Lançamento do processo filho e decodificação do término.

Extraído de `core` para isolar o contacto com ``subprocess`` e ``signal``.
O término do filho é devolvido como variante ``NormalExit`` / ``Signaled``;
o loop decide apenas sobre essa variante, nunca sobre o status numérico cru.
"""

from __future__ import annotations

import logging
import signal
import subprocess  # nosec B404 - comando fornecido pelo próprio utilizador
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Union

from ..errors import LaunchError, WaitError
from .args import LaunchMode, RunConfig

logger = logging.getLogger(__name__)

# Sinais que um utilizador envia a partir do terminal para parar o processo em primeiro plano
INTERACTIVE_SIGNALS = tuple(
    s for s in (getattr(signal, "SIGINT", None), getattr(signal, "SIGQUIT", None)) if s is not None
)

# Código observado quando o programa não pôde ser executado no modo direto
EXEC_FAILURE_CODE = 1


# ========================
# 1. Variantes de término
# ========================


@dataclass(frozen=True)
class NormalExit:
    """O filho terminou normalmente com ``code``."""

    code: int

    @property
    def exit_code(self) -> int:
        return self.code

    @property
    def interrupted(self) -> bool:
        return False


@dataclass(frozen=True)
class Signaled:
    """O filho foi terminado pelo sinal ``signum``."""

    signum: int

    @property
    def exit_code(self) -> int:
        # convenção do shell: 128 + número do sinal
        return 128 + self.signum

    @property
    def interrupted(self) -> bool:
        return self.signum in INTERACTIVE_SIGNALS

    @property
    def signal_name(self) -> str:
        try:
            return signal.Signals(self.signum).name
        except ValueError:
            return f"SIG{self.signum}"


RunOutcome = Union[NormalExit, Signaled]


def decode_returncode(returncode: int) -> RunOutcome:
    """Converte ``Popen.returncode`` (negativo = sinal) na variante."""
    if returncode < 0:
        return Signaled(-returncode)
    return NormalExit(returncode)


# ========================
# 2. Sinais durante a espera
# ========================


def _noop_handler(signum, frame) -> None:
    logger.debug("sinal %s recebido enquanto o filho executa; ignorado", signum)


@contextmanager
def ignore_interactive_signals() -> Iterator[None]:
    """Ignora SIGINT/SIGQUIT no supervisor enquanto o filho executa.

    Usa um handler vazio (e não ``SIG_IGN``) para que o filho, após o exec,
    volte à disposição padrão e receba o sinal do terminal. Fora da thread
    principal não altera nada.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = {}
    try:
        for signum in INTERACTIVE_SIGNALS:
            previous[signum] = signal.signal(signum, _noop_handler)
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


# ========================
# 3. Lançamento e espera
# ========================


def _program_name(config: RunConfig) -> str:
    """Nome do programa para mensagens de diagnóstico (primeiro token do comando)."""
    return config.argv[0] if config.argv else str(config.command)


def spawn(config: RunConfig) -> subprocess.Popen | None:
    """Cria o processo filho conforme ``config.launch_mode``.

    Devolve ``None`` quando, no modo direto, o programa não pôde ser
    executado (não encontrado, sem permissão, ...): essa falha é do filho e
    não do supervisor. Qualquer outra falha do lançamento levanta
    ``LaunchError``.
    """
    if config.launch_mode is LaunchMode.VIA_SHELL:
        try:
            return subprocess.Popen(config.command, shell=True, executable=config.shell)  # nosec B602
        except OSError as exc:
            raise LaunchError(f"não foi possível executar o comando: {exc}") from exc

    try:
        return subprocess.Popen(list(config.command), shell=False)  # nosec B603
    except OSError as exc:
        # erros do exec no filho chegam com filename preenchido; falhas do fork não
        if exc.filename is not None:
            logger.warning("falha ao executar %s: %s", _program_name(config), exc.strerror or exc)
            return None
        raise LaunchError(f"não foi possível executar o comando: {exc}") from exc


def wait_child(proc: subprocess.Popen) -> int:
    """Bloqueia até o filho terminar e devolve ``returncode``.

    EINTR já é repetido por ``Popen.wait``; qualquer outro erro é fatal.
    """
    try:
        return proc.wait()
    except OSError as exc:
        raise WaitError(f"erro fatal aguardando o filho: {exc}") from exc


def run_command(config: RunConfig) -> RunOutcome:
    """Executa uma invocação do comando e devolve o seu término."""
    with ignore_interactive_signals():
        proc = spawn(config)
        if proc is None:
            return NormalExit(EXEC_FAILURE_CODE)
        logger.debug("filho %s lançado: %s (%s)", proc.pid, _program_name(config), config.launch_mode.value)
        returncode = wait_child(proc)
    outcome = decode_returncode(returncode)
    logger.debug("filho %s (%s) terminou: %s", proc.pid, _program_name(config), outcome)
    return outcome
