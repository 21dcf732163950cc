"""
Retry con Exponential Backoff para la capa HTTP.

Sólo reintenta errores TRANSITORIOS del almacén (StoreUnavailableError), nunca
errores de negocio como NotFound o VersionConflict. El núcleo no reintenta:
quien decide reintentar es el llamador.
"""

import logging
import time
from typing import Any, Callable

from core.domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (StoreUnavailableError,)


def retry_with_backoff(
    func: Callable[[], Any],
    max_retries: int = 2,
    base_delay: float = 0.5,
    retryable_exceptions: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
) -> Any:
    """
    Ejecuta `func()` con reintentos y backoff exponencial.

    Args:
        func:                 Callable sin argumentos a ejecutar.
        max_retries:          Reintentos máximos (sin contar el intento original).
        base_delay:           Delay base en segundos (se duplica en cada retry).
        retryable_exceptions: Excepciones que justifican un retry.

    Returns:
        El resultado de `func()`.

    Raises:
        La última excepción si se agotan los reintentos, o la original si no
        es retryable.
    """
    attempt = 1
    while True:
        try:
            return func()
        except retryable_exceptions as e:
            if attempt > max_retries:
                logger.error(f"❌ Agotados {max_retries} reintentos. Último error: {e}")
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                f"🔁 Retry {attempt}/{max_retries} tras error transitorio: {e}. "
                f"Esperando {delay:.2f}s..."
            )
            time.sleep(delay)
            attempt += 1
