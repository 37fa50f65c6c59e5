"""Bill domain specific exceptions."""

from epr.domain.common.exceptions import EPRError


class BillError(EPRError):
    """Base class for bill domain errors."""


class BillNotFoundError(BillError):
    """Raised when the requested bill cannot be found."""


class DuplicateBillError(BillError):
    """Raised when a bill with the same content hash already exists."""


class AccessDeniedError(BillError):
    """Raised when the requester's role or ownership does not permit the action."""


class EncodingError(BillError):
    """Raised when a bill payload cannot be canonically serialised."""
