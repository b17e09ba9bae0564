"""
Bounded retry of atomic units

Connection loss and deadlocks surface from Django as ``OperationalError`` or
``InterfaceError``. An operation that owns the outermost transaction can be
replayed safely because a failed attempt left nothing committed. Inside an
enclosing transaction the failure is propagated untouched: the enclosing
block is already broken and only its owner can retry.

Settings:
    TRANSIENT_RETRY_ATTEMPTS: total tries, including the first (default 3)
    TRANSIENT_RETRY_DELAY: base pause in seconds (default 0.05); the pause
        grows linearly, ``delay * attempt`` after each failed attempt
"""

from functools import wraps
import logging
import time

from django.conf import settings
from django.db import InterfaceError, OperationalError, transaction

from shared.domain.exceptions import TransientStorageError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def retry_on_transient(func):
    """Replay ``func`` on transient storage failures, up to the configured attempts."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        if transaction.get_connection().in_atomic_block:
            return func(*args, **kwargs)

        attempts = max(1, int(getattr(settings, "TRANSIENT_RETRY_ATTEMPTS", 3)))
        delay = float(getattr(settings, "TRANSIENT_RETRY_DELAY", 0.05))

        for attempt in range(1, attempts + 1):
            try:
                return func(*args, **kwargs)
            except TRANSIENT_ERRORS as e:
                if attempt == attempts:
                    logger.error(
                        f"{func.__qualname__} failed after {attempts} attempts: {e}",
                        exc_info=True,
                    )
                    raise TransientStorageError(attempts, e) from e
                logger.warning(
                    f"{func.__qualname__} hit a transient storage error "
                    f"(attempt {attempt}/{attempts}): {e}"
                )
                time.sleep(delay * attempt)

    return wrapper
