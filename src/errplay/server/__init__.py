"""
Collector server components.
"""

from .api import app, create_app, is_development_post_request
from .formatting import log_error_payload

__all__ = [
    "app",
    "create_app",
    "is_development_post_request",
    "log_error_payload",
]
