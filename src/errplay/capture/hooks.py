"""
Process-wide capture points.

SysHost attaches to the interpreter's global failure surfaces:

- uncaught exception: ``sys.excepthook`` and ``threading.excepthook``
- unhandled rejection: asyncio's default exception handler, which reports
  task exceptions that were never retrieved
- explicit log interception: ``logging.Logger.callHandlers``, which every
  emitted record passes through

Every hook keeps the original behavior and only adds a callback.
"""

import asyncio
import logging
import sys
import threading
import traceback
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


def _exception_message(exc: BaseException) -> str:
    try:
        return str(exc) or type(exc).__name__
    except Exception:
        return type(exc).__name__


@dataclass(frozen=True)
class ErrorEvent:
    """An uncaught exception and where it was raised. ``colno`` is 1-based."""

    message: str
    filename: Optional[str] = None
    lineno: Optional[int] = None
    colno: Optional[int] = None
    error: Optional[BaseException] = None

    @classmethod
    def from_exception(cls, exc: BaseException, tb: Any = None) -> "ErrorEvent":
        """Build an event from an exception, locating its innermost frame."""
        tb = tb if tb is not None else exc.__traceback__
        filename = lineno = colno = None
        if tb is not None:
            frames = traceback.extract_tb(tb)
            if frames:
                last = frames[-1]
                filename = last.filename
                lineno = last.lineno
                # FrameSummary columns are 0-based offsets
                offset = getattr(last, "colno", None)
                colno = offset + 1 if offset is not None else None
        return cls(
            message=_exception_message(exc),
            filename=filename,
            lineno=lineno,
            colno=colno,
            error=exc,
        )


ErrorCallback = Callable[[ErrorEvent], None]
RejectionCallback = Callable[[Any], None]
LogCallback = Callable[[List[Any]], None]


class Host(Protocol):
    """Global event surface the capture controller registers on."""

    def supported(self) -> bool: ...

    def install(
        self,
        on_error: ErrorCallback,
        on_rejection: RejectionCallback,
        on_log: LogCallback,
    ) -> None: ...


def should_capture(record: logging.LogRecord) -> bool:
    """ERROR and above, except errplay's own diagnostics."""
    return record.levelno >= logging.ERROR and record.name.split(".")[0] != "errplay"


def record_args(record: logging.LogRecord) -> List[Any]:
    """The argument list a logging call was made with."""
    if isinstance(record.args, tuple):
        args = [record.msg, *record.args]
    elif record.args:
        args = [record.msg, record.args]
    else:
        args = [record.msg]
    if record.exc_info and record.exc_info[1] is not None:
        args.append(record.exc_info[1])
    return args


class SysHost:
    """Capture points backed by the running interpreter."""

    def __init__(self):
        self._local = threading.local()
        self._installed = False
        self._previous_excepthook = None
        self._previous_threading_excepthook = None
        self._previous_loop_handler = None
        self._previous_call_handlers = None

    @property
    def suppressed(self) -> bool:
        return getattr(self._local, "suppressed", False)

    def supported(self) -> bool:
        """True when the interpreter exposes a global exception hook."""
        return callable(getattr(sys, "excepthook", None))

    def install(
        self,
        on_error: ErrorCallback,
        on_rejection: RejectionCallback,
        on_log: LogCallback,
    ) -> None:
        """Attach all three capture points."""
        if self._installed:
            return
        self._install_excepthooks(on_error)
        self._install_loop_handler(on_rejection)
        self._install_log_hook(on_log)
        self._installed = True

    def _install_excepthooks(self, on_error: ErrorCallback) -> None:
        previous = self._previous_excepthook = sys.excepthook
        previous_threading = self._previous_threading_excepthook = threading.excepthook

        def excepthook(exc_type, exc, tb):
            try:
                if not issubclass(exc_type, KeyboardInterrupt):
                    on_error(ErrorEvent.from_exception(exc, tb))
            except Exception as e:
                logger.warning(f"errplay: Failed to capture uncaught exception: {e!r}")
            finally:
                previous(exc_type, exc, tb)

        def threading_excepthook(args):
            try:
                if args.exc_value is not None and not issubclass(args.exc_type, SystemExit):
                    on_error(ErrorEvent.from_exception(args.exc_value, args.exc_traceback))
            except Exception as e:
                logger.warning(f"errplay: Failed to capture thread exception: {e!r}")
            finally:
                previous_threading(args)

        sys.excepthook = excepthook
        threading.excepthook = threading_excepthook

    def _install_loop_handler(self, on_rejection: RejectionCallback) -> None:
        loop_class = asyncio.BaseEventLoop
        previous = self._previous_loop_handler = loop_class.default_exception_handler
        host = self

        def default_exception_handler(self, context):
            try:
                on_rejection(context.get("exception") or context.get("message"))
            except Exception as e:
                logger.warning(f"errplay: Failed to capture unhandled rejection: {e!r}")
            host._local.suppressed = True
            try:
                previous(self, context)
            finally:
                host._local.suppressed = False

        loop_class.default_exception_handler = default_exception_handler

    def _install_log_hook(self, on_log: LogCallback) -> None:
        # The root logger keeps no handler of ours, so lastResort and a later
        # basicConfig() behave as they would without errplay.
        previous = self._previous_call_handlers = logging.Logger.callHandlers
        host = self

        def call_handlers(self, record):
            # Records asyncio emits while a rejection is already being captured
            # must not come back around.
            if should_capture(record) and not host.suppressed:
                try:
                    on_log(record_args(record))
                except Exception as e:
                    logger.warning(f"errplay: Failed to capture logged error: {e!r}")
            previous(self, record)

        logging.Logger.callHandlers = call_handlers

    def uninstall(self) -> None:
        """Restore every hook this host replaced."""
        if not self._installed:
            return
        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_threading_excepthook
        asyncio.BaseEventLoop.default_exception_handler = self._previous_loop_handler
        logging.Logger.callHandlers = self._previous_call_handlers
        self._installed = False
