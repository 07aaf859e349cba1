"""Pacote core: orquestração principal do programa.

Contém o loop principal, parsing de argumentos e o emissor para o terminal.
"""

from .emitter import TerminalRenderer
from .core import run_loop

__all__ = ["TerminalRenderer", "run_loop"]
