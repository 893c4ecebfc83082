# booklend/utils/retry.py
"""
Caller-driven retry for transient store failures.

Only connection-level errors and lost conditional-update races are retried.
Validation, constraint, not-found and lending outcomes are terminal for the
call and are re-raised on the first attempt.
"""
from __future__ import annotations

import logging
import random
import time

from sqlalchemy.exc import DBAPIError, OperationalError

from booklend.errors import ConcurrencyConflict

logger = logging.getLogger(__name__)


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ConcurrencyConflict):
        return True
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return False


def backoff_delay(attempt: int, base: float) -> float:
    """Exponential backoff with +/-25% jitter."""
    delay = base * (2 ** attempt)
    return delay * random.uniform(0.75, 1.25)


def with_retry(fn, *args, attempts: int = 3, backoff: float = 0.2, on_retry=None, **kwargs):
    """
    Call ``fn(*args, **kwargs)`` up to ``attempts`` times.

    ``on_retry`` runs after a transient failure, before sleeping; services pass
    their session's rollback so the next attempt starts a fresh transaction.
    """
    for attempt in range(attempts):
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            if not is_transient(e) or attempt == attempts - 1:
                raise
            if on_retry is not None:
                on_retry()
            delay = backoff_delay(attempt, backoff)
            logger.warning(
                f"[retry] {getattr(fn, '__name__', fn)} failed ({e.__class__.__name__}), "
                f"attempt {attempt + 1}/{attempts}, retry in {delay:.2f}s"
            )
            time.sleep(delay)
