from __future__ import annotations

from typing import Callable

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from safe_ledger.core.clock import Clock, SystemClock
from safe_ledger.core.config import settings
from safe_ledger.core.identity import Actor, Role
from safe_ledger.core.logging import bind_actor, get_logger
from safe_ledger.db.session import get_session
from safe_ledger.errors import PermissionDenied
from safe_ledger.ledger.store import LedgerStore

logger = get_logger(__name__)

_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock


def get_store(db: Session = Depends(get_session), clock: Clock = Depends(get_clock)) -> LedgerStore:
    return LedgerStore(db, clock, settings)


async def get_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Actor:
    """Actor as asserted by the upstream identity provider."""
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing actor identity")
    try:
        role = Role(x_actor_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown actor role") from None
    actor = Actor(id=x_actor_id.strip(), role=role)
    bind_actor(actor.id, actor.role.value)
    return actor


def require_role(required: Role) -> Callable[..., Actor]:
    def dependency(actor: Actor = Depends(get_actor)) -> Actor:
        if not actor.has_permission(required):
            logger.warning("permission_denied", required_role=required.value)
            raise PermissionDenied(required.value)
        return actor

    return dependency
