"""
Error payload schema shared by the capture side and the collector.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class PayloadType(str, Enum):
    """Capture point a payload originated from."""

    ERROR = "error"
    UNHANDLED_REJECTION = "unhandledRejection"
    CONSOLE_ERROR = "consoleError"


class ErrorPayload(BaseModel):
    """One captured failure event. Immutable once built."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    type: PayloadType
    timestamp: int
    message: Optional[str] = None
    stack: Optional[str] = None
    filename: Optional[str] = None
    lineno: Optional[int] = None
    colno: Optional[int] = None
    args: Optional[List[Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        """JSON-safe dict used verbatim for both storage and transport."""
        return self.model_dump(exclude_none=True)


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)
