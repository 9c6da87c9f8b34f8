"""Helpers genéricos de sistema.

Utilitários pequenos e sem dependências pesadas usados pela camada de
configuração (leitura de ``.env`` e fusão com o ambiente do processo).
"""

import logging
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)


def read_env_file(path: Path | str) -> dict:
    """Leia um ficheiro `.env` simples e retorne um dicionário key->value.

    Regras:
    - Linhas vazias e que começam com '#' são ignoradas.
    - Um prefixo ``export `` é aceite e descartado.
    - A primeira '=' separa chave/valor; aspas simples ou duplas em torno do
      valor são removidas.
    - Comentários inline após um valor sem aspas são removidos.
    - Se o ficheiro não existir, retorna um dict vazio.
    """
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export ") :].lstrip()
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip()
                if len(val) >= 2 and val[0] == val[-1] and val[0] in ("'", '"'):
                    val = val[1:-1]
                elif "#" in val:
                    val = val.split("#", 1)[0].rstrip()
                result[key] = val
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


def merge_env_items(env_path: Path, process_env: Mapping[str, str]) -> dict:
    """Mescla itens de um ficheiro `.env` com o ambiente de processo.

    O mapeamento `process_env` (normalmente ``os.environ``) sobrescreve as
    chaves do ficheiro. A função não tem efeitos colaterais.
    """
    file_items = read_env_file(env_path)
    out = dict(file_items)
    out.update(dict(process_env))
    return out
