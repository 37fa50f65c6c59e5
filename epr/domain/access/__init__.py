"""Access resolution exports"""

from .models import AccessLevel, Disclosure, Requester, Role
from .resolver import disclosed_details, resolve_access, revealed_fields

__all__ = [
    "AccessLevel",
    "Disclosure",
    "Requester",
    "Role",
    "disclosed_details",
    "resolve_access",
    "revealed_fields",
]
