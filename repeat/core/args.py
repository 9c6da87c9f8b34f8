"""Resolvedor de argumentos: linha de comando -> RunConfig imutável.

Este módulo expõe:
- ``configure_argparser()``: parser argparse com as opções do repeat
- ``parse_interval()`` / ``parse_times()``: conversores estritos de valores
- ``build_command()``: monta o comando para o modo shell ou execução direta
- ``resolve_config()``: produz o ``RunConfig`` ou levanta ``EarlyExit``
- ``get_log_config()``: configuração de logging derivada de CLI + settings

O parsing de opções para no primeiro token que não é opção: o comando e os
seus argumentos seguem literalmente, mesmo que pareçam opções.
"""

from __future__ import annotations

import argparse
import enum
import logging
import re
import sys
from dataclasses import dataclass
from decimal import Decimal, DecimalException
from typing import Sequence, TextIO

from .. import __version__
from ..errors import EarlyExit, UsageError
from ..system.time_helpers import NS_IN_SEC, TimeSpec, ZERO

logger = logging.getLogger(__name__)

PROG = "repeat"
DEFAULT_SHELL = "/bin/sh"

VERSION_TEXT = f"{PROG} {__version__}\n"

EXAMPLES = """\
Exemplos:
  repeat echo Hello World            imprime Hello World para sempre
  repeat -t 5 echo Hello World       imprime Hello World cinco vezes
  repeat -i 1 echo Hello World       imprime Hello World com um segundo
                                     entre cada invocação
  repeat -i 1 -e -p -t 5 echo Hello World
                                     imprime Hello World cinco vezes, uma vez
                                     por segundo, parando se o echo falhar
"""

_UNIT_FACTORS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}

_INTERVAL_RE = re.compile(r"^\s*(?P<num>[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)(?P<unit>.*)$")
_TIMES_RE = re.compile(r"^\s*(?P<num>[+-]?[0-9]+)$")


# ========================
# 0. Modelo de configuração
# ========================


class LaunchMode(enum.Enum):
    """Como o filho é lançado."""

    VIA_SHELL = "shell"
    DIRECT = "direct"


@dataclass(frozen=True)
# Configuração única do processo; construída por resolve_config e consumida por core.run_loop
class RunConfig:
    """Configuração imutável de uma execução do repeat.

    ``command`` é a string juntada (VIA_SHELL) ou o vetor de argumentos
    (DIRECT). ``times == 0`` significa repetir para sempre.
    """

    command: str | tuple[str, ...]
    argv: tuple[str, ...] = ()
    times: int = 0
    interval: TimeSpec = ZERO
    precise: bool = False
    until_error: bool = False
    until_success: bool = False
    launch_mode: LaunchMode = LaunchMode.VIA_SHELL
    shell: str = DEFAULT_SHELL
    debug: bool = False
    log_level: str | None = None
    log_root: str | None = None


# ========================
# 1. Conversores de valores
# ========================


def parse_interval(text: str) -> TimeSpec:
    """Converte uma duração (número + sufixo opcional d/h/m/s) em TimeSpec.

    Sem sufixo a unidade é segundos. O token inteiro precisa ser consumido.
    A parte fracionária, após a escala da unidade, vira o resto em
    nanossegundos.
    """
    m = _INTERVAL_RE.match(text or "")
    if m is None:
        raise argparse.ArgumentTypeError(f"intervalo inválido: {text!r}")
    unit = m.group("unit")
    if unit not in _UNIT_FACTORS:
        raise argparse.ArgumentTypeError("unidade inválida para o intervalo - deve ser d, h, m ou s")
    try:
        magnitude = Decimal(m.group("num")) * _UNIT_FACTORS[unit]
    except DecimalException as exc:
        raise argparse.ArgumentTypeError(f"intervalo inválido: {text!r}") from exc
    if magnitude < 0:
        raise argparse.ArgumentTypeError("intervalo deve ser >= 0")
    sec = int(magnitude)
    nsec = int(((magnitude - sec) * NS_IN_SEC).to_integral_value())
    return TimeSpec.normalized(sec, nsec)


def parse_times(text: str) -> int:
    """Converte o número de repetições; rejeita lixo no fim e valores negativos."""
    m = _TIMES_RE.match(text or "")
    if m is None:
        raise argparse.ArgumentTypeError(f"número de repetições inválido: {text!r}")
    value = int(m.group("num"))
    if value < 0:
        raise argparse.ArgumentTypeError("número de repetições deve ser >= 0")
    return value


def build_command(tokens: Sequence[str], launch_mode: LaunchMode) -> str | tuple[str, ...]:
    """Monta o comando a partir dos tokens restantes.

    No modo shell os tokens são juntados com um espaço, sem aspas nem
    escape: metacaracteres nos argumentos são interpretados pelo shell.
    """
    if launch_mode is LaunchMode.DIRECT:
        return tuple(tokens)
    return " ".join(tokens)


# ========================
# 2. Parser
# ========================


class _Parser(argparse.ArgumentParser):
    """ArgumentParser que levanta UsageError em vez de sair com status 2."""

    def error(self, message):  # type: ignore[override]
        raise UsageError(message)


# Função principal do módulo; cria e retorna o ArgumentParser configurado
def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna o ArgumentParser do repeat."""
    parser = _Parser(
        prog=PROG,
        usage="%(prog)s [-ehpsx] [-t NUM] [-i DURATION] COMMAND [ARG...]",
        description="Executa COMMAND repetidamente, para sempre ou até a condição indicada.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )

    parser.add_argument(
        "-i",
        "--interval",
        type=parse_interval,
        default=ZERO,
        metavar="DURATION",
        help="intervalo entre invocações (número com sufixo opcional d, h, m ou s; padrão segundos)",
    )
    parser.add_argument(
        "-t",
        "--times",
        type=parse_times,
        default=0,
        metavar="NUM",
        help="executa NUM vezes e para (0 = infinito)",
    )
    parser.add_argument(
        "-e",
        "--untilerr",
        dest="until_error",
        action="store_true",
        help="para quando o código de saída do comando for diferente de zero",
    )
    parser.add_argument(
        "-s",
        "--untilsuccess",
        dest="until_success",
        action="store_true",
        help="para quando o código de saída do comando for zero",
    )
    parser.add_argument(
        "-p",
        "--precise",
        action="store_true",
        help="executa o comando em intervalos fixos em vez de esperar o intervalo entre execuções",
    )
    parser.add_argument(
        "-x",
        "--noshell",
        action="store_true",
        help='executa o comando diretamente em vez de via "sh -c"',
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="mostra a configuração resolvida e ativa logging DEBUG",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=None,
        help="nível de logging (DEBUG/INFO/WARNING/ERROR); substitui REPEAT_LOG_LEVEL",
    )
    parser.add_argument(
        "--log-root",
        dest="log_root",
        type=str,
        default=None,
        help="diretório para os ficheiros de debug; substitui REPEAT_LOG_ROOT",
    )
    parser.add_argument("-h", "--help", action="store_true", help="mostra esta ajuda e sai")
    parser.add_argument("-v", "-V", "--version", action="store_true", help="mostra a versão e sai")
    parser.add_argument("command", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)

    return parser


# ========================
# 3. Resolução da configuração
# ========================


def _usage_error(parser: argparse.ArgumentParser, message: str, stderr: TextIO) -> EarlyExit:
    stderr.write(parser.format_usage())
    stderr.write(f"{parser.prog}: erro: {message}\n\n")
    stderr.write(parser.format_help())
    return EarlyExit(1, message)


def resolve_config(
    argv: Sequence[str] | None = None,
    settings: dict | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> RunConfig:
    """Analisa ``argv`` e devolve o RunConfig.

    Levanta ``EarlyExit(0)`` depois de escrever ajuda/versão em ``stdout`` e
    ``EarlyExit(1)`` depois de escrever o uso em ``stderr``. Nenhum comando é
    executado nesses casos.
    """
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    if settings is None:
        from ..config.settings import load_settings

        settings = load_settings()

    parser = configure_argparser()
    try:
        ns = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    except UsageError as exc:
        raise _usage_error(parser, str(exc), err) from exc

    if ns.help:
        out.write(parser.format_help())
        raise EarlyExit(0)
    if ns.version:
        out.write(VERSION_TEXT)
        raise EarlyExit(0)

    tokens = list(ns.command)
    if tokens and tokens[0] == "--":
        tokens = tokens[1:]
    if not tokens:
        raise _usage_error(parser, "nenhum comando indicado", err)

    launch_mode = LaunchMode.DIRECT if ns.noshell else LaunchMode.VIA_SHELL
    config = RunConfig(
        command=build_command(tokens, launch_mode),
        argv=tuple(tokens),
        times=ns.times,
        interval=ns.interval,
        precise=ns.precise,
        until_error=ns.until_error,
        until_success=ns.until_success,
        launch_mode=launch_mode,
        shell=str(settings.get("shell") or DEFAULT_SHELL),
        debug=ns.debug,
        log_level=ns.log_level,
        log_root=ns.log_root,
    )
    logger.debug("configuração resolvida: %s", config)
    return config


# ========================
# 4. Funções auxiliares para logging e debug
# ========================


# Auxilia repeat.main; extrai configuração de logging (CLI > ambiente > .env > default)
def get_log_config(config: RunConfig, settings: dict | None = None) -> dict:
    """Retorna dict com 'level' e 'root' para a configuração de logging."""
    settings = settings or {}
    if config.log_level:
        level = str(config.log_level).upper()
    elif config.debug:
        level = "DEBUG"
    else:
        level = str(settings.get("log_level") or "WARNING").upper()
    if level not in logging.getLevelNamesMapping():
        logger.warning("nível de logging desconhecido %r; usando WARNING", level)
        level = "WARNING"
    return {"level": level, "root": config.log_root or settings.get("log_root")}


def describe_config(config: RunConfig) -> list[str]:
    """Linhas legíveis com a configuração resolvida (modo debug)."""

    def _b(v: bool) -> str:
        return "true" if v else "false"

    return [
        f"times = {config.times}",
        f"interval = {{ {config.interval.sec}, {config.interval.nsec} }}",
        f"precise = {_b(config.precise)}",
        f"until_error = {_b(config.until_error)}",
        f"until_success = {_b(config.until_success)}",
        f"launch_mode = {config.launch_mode.value}",
        f"command = {config.command!r}",
    ]
