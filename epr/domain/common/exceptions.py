"""Base exceptions shared by every domain module."""


class EPRError(Exception):
    """Base class for domain errors."""


class PersistenceError(EPRError):
    """Raised when a storage read or write fails."""
