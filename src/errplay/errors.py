"""
Exception types raised by errplay.

Only configuration errors ever reach the caller; everything raised on the
capture and delivery path is caught and reported to the diagnostic logger.
"""


class ErrplayError(Exception):
    """Base class for errplay errors."""


class ConfigurationError(ErrplayError, ValueError):
    """Raised by initialize() when required options are missing or invalid."""


class StorageError(ErrplayError):
    """Raised by a session store when the backing storage is inaccessible."""
