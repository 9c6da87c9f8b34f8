"""Ponto de entrada do repeat.

Este módulo realiza a inicialização da aplicação: carregamento das
configurações ambientais, resolução dos argumentos CLI, configuração de
logging, instalação opcional dos handlers de debug e execução do loop.
É o único ponto que converte exceções em status de saída.
"""

import logging as _logging
import sys

from .config.settings import load_settings
from .core.args import PROG, describe_config, get_log_config, resolve_config
from .core.core import run_loop
from .errors import EarlyExit, FatalError
from .system.logs import JSONLHandler, get_debug_file_path, get_json_file_path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    """Inicializa a aplicação e executa o loop até uma condição de paragem.

    Args:
        argv: Lista de argumentos sem o nome do programa (usada em testes).
            Quando ``None`` usa os argumentos do processo.

    Returns:
        Status de saída do processo.
    """
    settings = load_settings()
    try:
        config = resolve_config(argv, settings=settings)
    except EarlyExit as exc:
        return exc.status

    log_conf = get_log_config(config, settings)
    level = getattr(_logging, log_conf.get("level", "WARNING"), _logging.WARNING)
    _logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)

    if log_conf.get("root"):
        try:
            _setup_debug_file_handler(log_conf["root"], level, durable=bool(settings.get("durable_writes", True)))
        except Exception as exc:
            _logging.getLogger(__name__).debug("falha ao configurar debug file handler: %s", exc, exc_info=True)

    if config.debug:
        print("Debug ativado.")
        for line in describe_config(config):
            print(line)
        sys.stdout.flush()

    try:
        return run_loop(config)
    except FatalError as exc:
        _logging.getLogger(__name__).debug("erro fatal", exc_info=True)
        print(f"{PROG}: {exc}", file=sys.stderr)
        return exc.status


def _setup_debug_file_handler(root, level: int = _logging.DEBUG, durable: bool = True) -> None:
    """Instala handlers de ficheiro para debug e hook global de exceções.

    Adiciona dois handlers ao logger root: um human-readable (texto) e um
    JSONL (uma linha de JSON por evento, escrita com lock). Evita duplicar
    handlers se já existirem handlers com os mesmos caminhos. Também instala
    um ``sys.excepthook`` que envia exceções não tratadas para o logger root.
    """
    debug_path = get_debug_file_path(root)

    fh = _logging.FileHandler(str(debug_path), encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(_logging.Formatter(LOG_FORMAT))

    jfh = JSONLHandler(get_json_file_path(root), durable=durable, level=level)

    root_logger = _logging.getLogger()
    if _has_existing_file_handler(root_logger, fh, jfh):
        fh.close()
    else:
        root_logger.addHandler(fh)
        root_logger.addHandler(jfh)

    def _exc_hook(exc_type, exc_value, exc_tb):
        try:
            root_logger.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        except Exception:
            sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _exc_hook


def _has_existing_file_handler(root, fh, jfh) -> bool:
    bases = (getattr(fh, "baseFilename", None), getattr(jfh, "baseFilename", None))
    for h in root.handlers:
        if isinstance(h, (_logging.FileHandler, JSONLHandler)) and getattr(h, "baseFilename", None) in bases:
            return True
    return False


if __name__ == "__main__":
    sys.exit(main())
