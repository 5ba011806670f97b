from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    CASHIER = "cashier"
    MANAGER = "manager"
    ADMIN = "admin"


ROLE_RANK = {
    Role.CASHIER: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
}


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as handed over by the upstream identity provider."""

    id: str
    role: Role

    def has_permission(self, required: Role) -> bool:
        return ROLE_RANK[self.role] >= ROLE_RANK[required]
