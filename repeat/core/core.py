"""Core do repeat: loop de execução e agendamento.

Executa o comando segundo o ``RunConfig`` até uma condição de paragem,
aplicando a disciplina de tempo entre execuções (intervalo após o término
ou cadência fixa no modo preciso).
"""

from __future__ import annotations

import logging
import signal

from .args import RunConfig
from .launcher import RunOutcome, run_command as _run_command
from ..system.time_helpers import monotonic_now, sleep_until

logger = logging.getLogger(__name__)

# Status quando o próprio supervisor recebe SIGINT fora da espera pelo filho
KEYBOARD_INTERRUPT_STATUS = 128 + signal.SIGINT


# ========================
# 1. Avaliação das condições de paragem
# ========================


def evaluate_outcome(config: RunConfig, outcome: RunOutcome, remaining: int) -> tuple[bool, int, int]:
    """Decide se o loop para depois de uma invocação.

    Retorna ``(parar, status, restantes)``. A ordem das verificações é:
    interrupção do filho, ``until_error``, ``until_success`` e, por fim, o
    número de repetições (``remaining == 0`` significa infinito).
    """
    if outcome.interrupted:
        logger.info("filho interrompido por %s; parando", getattr(outcome, "signal_name", "sinal"))
        return True, 0, remaining

    code = outcome.exit_code
    if config.until_error and code != 0:
        logger.info("comando falhou com código %s; parando (--untilerr)", code)
        return True, code, remaining
    if config.until_success and code == 0:
        logger.info("comando terminou com sucesso; parando (--untilsuccess)")
        return True, 0, remaining

    if remaining > 0:
        remaining -= 1
        if remaining == 0:
            logger.debug("repetições esgotadas; último código %s", code)
            return True, code, remaining
    return False, code, remaining


# ========================
# 2. Loop principal
# ========================


# Função principal do módulo; executa o comando até uma condição de paragem
def run_loop(config: RunConfig) -> int:
    """Loop principal: lança, aguarda, avalia e agenda a próxima execução.

    Parâmetros:
        config: configuração imutável produzida por ``resolve_config``.

    Retorna o status de saída do processo. ``ClockError``, ``WaitError`` e
    ``LaunchError`` propagam para o chamador.
    """
    interval = config.interval
    remaining = config.times
    deadline = monotonic_now() if config.precise else None
    executed = 0

    try:
        while True:
            if config.precise:
                # deadline acumulativo: nunca recalculado a partir de "agora"
                deadline = deadline + interval

            outcome = _run_command(config)
            executed += 1
            logger.debug("invocação %d: %s", executed, outcome)

            stop, status, remaining = evaluate_outcome(config, outcome, remaining)
            if stop:
                return status

            if interval:
                if not config.precise:
                    deadline = monotonic_now() + interval
                sleep_until(deadline)
    except KeyboardInterrupt:
        logger.info("Recebido KeyboardInterrupt após %d invocações, saindo...", executed)
        return KEYBOARD_INTERRUPT_STATUS
