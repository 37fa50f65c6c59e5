"""Shared abstractions used across domain modules."""

from .exceptions import EPRError, PersistenceError
from .money import from_cents, quantize, to_cents

__all__ = ["EPRError", "PersistenceError", "from_cents", "quantize", "to_cents"]
