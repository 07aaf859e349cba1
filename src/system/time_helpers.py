from typing import Optional
import datetime
import logging

logger = logging.getLogger(__name__)

LOCAL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_local_time(epoch: float, fmt: str = LOCAL_TIME_FORMAT) -> str:
    """Formata um epoch (segundos) como data/hora local.

    Retorna a representação crua do valor quando não for possível formatar.
    """
    try:
        return datetime.datetime.fromtimestamp(float(epoch)).strftime(fmt)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        logger.debug("format_local_time: epoch inválido %r: %s", epoch, exc)
        return str(epoch)


def elapsed_seconds(start: float, now: Optional[float]) -> int:
    """Segundos inteiros decorridos desde `start`; nunca negativo."""
    if now is None:
        import time

        now = time.time()
    try:
        delta = int(float(now) - float(start))
    except (TypeError, ValueError):
        return 0
    return delta if delta > 0 else 0
