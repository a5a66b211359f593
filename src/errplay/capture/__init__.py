"""
Capture components: serializer, durable queue, transport, and controller.
"""

from .serializer import serialize
from .payload import ErrorPayload, PayloadType
from .queue import DurableQueue
from .transport import BeaconTransport, Transport
from .hooks import ErrorEvent, Host, SysHost
from .controller import CaptureController, ControllerState, Options, get_controller, initialize

__all__ = [
    "serialize",
    "ErrorPayload",
    "PayloadType",
    "DurableQueue",
    "BeaconTransport",
    "Transport",
    "ErrorEvent",
    "Host",
    "SysHost",
    "CaptureController",
    "ControllerState",
    "Options",
    "get_controller",
    "initialize",
]
