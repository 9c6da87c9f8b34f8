"""repeat: executa um comando repetidamente.

Pacote com o resolvedor de argumentos (``core.args``), o loop de execução
(``core.core``) e os helpers de tempo, logs e configuração.
"""

__version__ = "0.1.0"
