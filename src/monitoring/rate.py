"""Cálculo de taxa de execução (delta entre ciclos) e média.

O contador primário pode ultrapassar o máximo configurado porque os workers
incrementam incondicionalmente; tanto o valor exibido como a taxa usam o
valor limitado (`clamp_iterations`) para que a média e a taxa instantânea
fiquem coerentes.
"""


def clamp_iterations(raw: int, maximum: int) -> int:
    """Limita `raw` a `maximum` quando um máximo positivo está configurado."""
    if maximum > 0 and raw > maximum:
        return maximum
    return raw


def average_rate(total: int, elapsed: int) -> int:
    """Média inteira de execuções por segundo; 0 quando nenhum tempo passou."""
    if elapsed > 0:
        return int(total // elapsed)
    return 0


class RateTracker:
    """Guarda a contagem do ciclo anterior e calcula o delta.

    Uma única instância por display; só a thread do display a altera, por
    isso não há lock.
    """

    def __init__(self):
        self.previous_count = 0

    def compute_rate(self, current: int) -> int:
        """Retorna `current - previous_count` e memoriza `current`.

        No primeiro ciclo a taxa é igual à contagem absoluta. Um valor menor
        que o anterior resulta em 0.
        """
        rate = current - self.previous_count
        self.previous_count = current
        return rate if rate > 0 else 0
