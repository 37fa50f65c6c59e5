"""Enumerations describing who is asking and what a bill allows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    PUBLIC = "public"
    INSTITUTION_USER = "institution_user"
    INSTITUTION_ADMIN = "institution_admin"
    VERIFIER = "verifier"
    MASTER_ADMIN = "master_admin"

    @classmethod
    def parse(cls, value: "Role | str | None") -> "Role":
        """Coerce a raw role claim, falling back to ``public`` for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.PUBLIC


class AccessLevel(str, Enum):
    PUBLIC = "public"
    RESTRICTED = "restricted"
    GOVERNMENT = "government"
    FINANCIAL = "financial"


class Disclosure(str, Enum):
    FULL = "full"
    LIMITED = "limited"
    NONE = "none"


@dataclass(slots=True, frozen=True)
class Requester:
    """An authenticated caller as seen by the domain services."""

    id: str
    role: Role
    organization_name: Optional[str] = None
