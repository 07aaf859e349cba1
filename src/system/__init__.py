"""Pacote system: helpers de processo, tempo, logs e simulação de workers."""
