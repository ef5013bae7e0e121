from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "ADMIN"
    GENERAL_MANAGER = "GENERAL_MANAGER"
    MANAGER = "MANAGER"
    WORKER = "WORKER"

    @property
    def is_administrative(self) -> bool:
        return self in (Role.ADMIN, Role.GENERAL_MANAGER)


@dataclass(frozen=True)
class Actor:
    """The acting user as handed over by the authentication layer"""
    id: str
    role: Role
    location_id: Optional[str] = None
    name: Optional[str] = None

    def __str__(self) -> str:
        return self.name or self.id
