"""
errplay: capture runtime errors during development and replay them to a
collector, even across reloads.
"""

from .capture import (
    CaptureController,
    ErrorPayload,
    Options,
    PayloadType,
    get_controller,
    initialize,
    serialize,
)
from .errors import ConfigurationError, ErrplayError

__version__ = "0.1.0"

__all__ = [
    "initialize",
    "get_controller",
    "CaptureController",
    "Options",
    "ErrorPayload",
    "PayloadType",
    "serialize",
    "ErrplayError",
    "ConfigurationError",
]
