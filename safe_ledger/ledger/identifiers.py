"""Receipt and withdrawal numbers.

Numbers look like ``DROP-1704892800000-042``: a prefix, the 13-digit epoch
milliseconds of the ledger clock and three random digits. They sort
lexically by creation time.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import TransientStoreError

DROP_PREFIX = "DROP"
WITHDRAWAL_PREFIX = "WD"
MAX_ATTEMPTS = 20

logger = get_logger(__name__)

_random = random.SystemRandom()
T = TypeVar("T")


def _epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def format_number(prefix: str, moment: datetime, suffix: int) -> str:
    return f"{prefix}-{_epoch_millis(moment):013d}-{suffix:03d}"


def new_number(prefix: str, moment: datetime, taken: Callable[[str], bool]) -> str:
    """Pick a number not yet used in its stream; the unique index is the backstop."""
    for _ in range(MAX_ATTEMPTS):
        candidate = format_number(prefix, moment, _random.randrange(1000))
        if not taken(candidate):
            return candidate
    raise TransientStoreError(f"allocate {prefix} number")


def retry_on_number_collision(column: str, write: Callable[[], T]) -> T:
    """Run ``write`` again when a concurrent writer took the same number first.

    ``write`` must open and finish its own transaction so each attempt draws a
    fresh number. Integrity errors on any other constraint propagate.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            return write()
        except IntegrityError as exc:
            if column not in str(exc.orig):
                raise
            logger.warning("number_collision", column=column, attempt=attempt)
    raise TransientStoreError(f"allocate {column}")
