"""Retry policy for reads against the ledger database."""

from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError

from safe_ledger.core.logging import get_logger
from safe_ledger.core.observability import store_failures
from safe_ledger.errors import TransientStoreError

logger = get_logger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError)
T = TypeVar("T")


def transient_retry(fn: Callable[..., T]) -> Callable[..., T]:
    """Retry a pure read after a backoff when the database hiccups.

    The decorated method's owner provides ``session`` and ``settings``. Reads
    made inside a write transaction (``in_write``) are not retried: rolling
    back would release the locks and pending appends of that transaction.
    """

    @wraps(fn)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        in_write = getattr(self, "in_write", False)
        attempts = 0 if in_write else self.settings.store_retry_attempts
        for attempt in range(attempts + 1):
            try:
                return fn(self, *args, **kwargs)
            except TRANSIENT_ERRORS as exc:
                if in_write or attempt == attempts:
                    logger.error("store_read_failed", operation=fn.__name__, attempt=attempt + 1)
                    store_failures.add(1, {"operation": fn.__name__})
                    raise TransientStoreError(fn.__name__, exc) from exc
                logger.warning("store_read_retry", operation=fn.__name__, attempt=attempt + 1)
                self.session.rollback()
                time.sleep(self.settings.store_retry_backoff_seconds * (attempt + 1))
        raise AssertionError("unreachable")

    return wrapper
