"""
Capture controller: initialization guard, startup flush, and capture points.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

import httpx

from ..config import Config, config
from ..errors import ConfigurationError
from ..storage import SessionStore, create_session_store
from .hooks import ErrorEvent, Host, SysHost
from .payload import ErrorPayload, PayloadType, now_ms
from .queue import DurableQueue
from .serializer import format_stack, serialize
from .transport import BeaconTransport, Transport, resolve_endpoint

logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    ACTIVE = "active"


@dataclass
class Options:
    """Options accepted by initialize(); only ``endpoint`` is required."""

    endpoint: str
    store: Optional[SessionStore] = None
    transport: Optional[Transport] = None
    host: Optional[Host] = None


def validate_options(options: Any, base_url: Optional[str] = None) -> Options:
    """
    Check caller-supplied options, raising ConfigurationError on misuse.

    The endpoint must resolve to a URL against ``base_url`` (the configured
    collector URL by default).
    """
    if isinstance(options, Options):
        endpoint = options.endpoint
    elif isinstance(options, Mapping):
        endpoint = options.get("endpoint")
    else:
        raise ConfigurationError("initialize requires an options mapping.")

    if not endpoint or not isinstance(endpoint, str):
        raise ConfigurationError("initialize requires options['endpoint'] (string) to be specified.")
    try:
        resolve_endpoint(endpoint, base_url)
    except (httpx.InvalidURL, ValueError) as e:
        raise ConfigurationError(f"initialize received an invalid endpoint {endpoint!r}: {e}") from e

    if isinstance(options, Options):
        return options
    return Options(
        endpoint=endpoint,
        store=options.get("store"),
        transport=options.get("transport"),
        host=options.get("host"),
    )


class CaptureController:
    """
    Owns the capture pipeline for one process.

    State moves Uninitialized -> Initializing -> Active exactly once. Calls to
    initialize() made while unsupported, outside development, or after the
    guard is set are no-ops, so repeated calls after a module reload never
    attach listeners twice.
    """

    def __init__(self, cfg: Optional[Config] = None, host: Optional[Host] = None):
        self.config = cfg or config
        self.host = host
        self.state = ControllerState.UNINITIALIZED
        self.initialized = False
        self.queue: Optional[DurableQueue] = None
        self.transport: Optional[Transport] = None

    def initialize(self, options: Any) -> bool:
        """
        Start capturing.

        Returns True when this call activated capture, False when it was a no-op.
        Raises ConfigurationError for invalid options in every environment.
        """
        opts = validate_options(options, base_url=self.config.collector_url)

        host = opts.host or self.host or SysHost()
        if not host.supported():
            return False
        if not self.config.is_development:
            return False
        if self.initialized:
            return False

        queue = DurableQueue(opts.store or create_session_store(self.config))
        transport = opts.transport or BeaconTransport(
            opts.endpoint,
            base_url=self.config.collector_url,
            timeout=self.config.transport_timeout,
        )

        self.state = ControllerState.INITIALIZING
        self.initialized = True
        self.host = host
        self.queue = queue
        self.transport = transport

        self.flush()
        host.install(
            on_error=self.handle_error,
            on_rejection=self.handle_rejection,
            on_log=self.handle_log,
        )
        self.state = ControllerState.ACTIVE
        logger.debug(f"errplay: Capturing errors for session {self.config.session_id}")
        return True

    def flush(self) -> int:
        """Send every payload left over from a previous process, in order."""
        drained = self.queue.drain_all()
        for payload in drained:
            self.transport.send(payload)
        return len(drained)

    def capture(self, payload: ErrorPayload) -> None:
        """Persist, then send, one payload."""
        wire = payload.to_wire()
        self.queue.enqueue(wire)
        self.transport.send(wire)

    def handle_error(self, event: ErrorEvent) -> None:
        try:
            payload = ErrorPayload(
                type=PayloadType.ERROR,
                message=event.message,
                filename=event.filename,
                lineno=event.lineno,
                colno=event.colno,
                stack=format_stack(event.error) if event.error is not None else None,
                timestamp=now_ms(),
            )
            self.capture(payload)
        except Exception as e:
            logger.warning(f"errplay: Failed to capture uncaught exception: {e}")

    def handle_rejection(self, reason: Any) -> None:
        try:
            if isinstance(reason, BaseException):
                message = str(reason) or type(reason).__name__
                stack = format_stack(reason)
            else:
                message = str(reason)
                stack = None
            payload = ErrorPayload(
                type=PayloadType.UNHANDLED_REJECTION,
                message=message,
                stack=stack,
                timestamp=now_ms(),
            )
            self.capture(payload)
        except Exception as e:
            logger.warning(f"errplay: Failed to capture unhandled rejection: {e}")

    def handle_log(self, args: List[Any]) -> None:
        try:
            payload = ErrorPayload(
                type=PayloadType.CONSOLE_ERROR,
                args=[serialize(arg) for arg in args],
                timestamp=now_ms(),
            )
            self.capture(payload)
        except Exception as e:
            logger.warning(f"errplay: Failed to capture logged error: {e}")


# Survives importlib.reload() of this module; a new process starts fresh.
if "_default_controller" not in globals():
    _default_controller: Optional[CaptureController] = None


def get_controller() -> CaptureController:
    """Return the process-wide controller, creating it on first use."""
    global _default_controller
    if _default_controller is None:
        _default_controller = CaptureController()
    return _default_controller


def initialize(options: Any) -> bool:
    """
    Capture uncaught exceptions, unhandled asyncio failures, and logged errors.

    Usage:
        import errplay
        errplay.initialize({"endpoint": "/__dev__/errors"})

    A no-op outside development (``ERRPLAY_ENV=development``) and on every call
    after the first.
    """
    return get_controller().initialize(options)
