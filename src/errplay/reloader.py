"""
Development reloader.

Runs a script as a child process and restarts it whenever a watched Python
file changes. Every child gets the same ERRPLAY_SESSION_ID, so errors queued
just before a restart are flushed by the next child.
"""

import logging
import os
import subprocess
import sys
import threading
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


def child_environment(session_id: str, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Environment for a child: development mode pinned to one session."""
    env = dict(os.environ if base is None else base)
    env["ERRPLAY_ENV"] = "development"
    env["ERRPLAY_SESSION_ID"] = session_id
    return env


class SourceChangeHandler(FileSystemEventHandler):
    """Debounces ``.py`` changes into a single restart."""

    def __init__(self, reloader: "DevReloader", debounce_seconds: float = 0.3):
        self.reloader = reloader
        self.debounce_seconds = debounce_seconds
        self.pending_timer: Optional[threading.Timer] = None
        self.lock = threading.Lock()

    def on_any_event(self, event):
        """Handle created/modified/moved/deleted events."""
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if not any(str(p).endswith(".py") for p in paths):
            return

        with self.lock:
            if self.pending_timer is not None:
                self.pending_timer.cancel()
            self.pending_timer = threading.Timer(self.debounce_seconds, self.reloader.restart)
            self.pending_timer.daemon = True
            self.pending_timer.start()


class DevReloader:
    """Keeps one child process running and restarts it on source changes."""

    def __init__(
        self,
        script: str,
        args: Sequence[str] = (),
        watch_dirs: Sequence[Path] = (),
        session_id: Optional[str] = None,
        debounce_seconds: float = 0.3,
    ):
        self.script = script
        self.args = list(args)
        self.watch_dirs = [Path(d) for d in watch_dirs] or [Path(script).resolve().parent]
        self.session_id = session_id or f"run-{uuid.uuid4().hex[:12]}"
        self.debounce_seconds = debounce_seconds

        self.process: Optional[subprocess.Popen] = None
        self.restarts = 0
        self._lock = threading.Lock()
        self._observer = None

    def command(self) -> List[str]:
        return [sys.executable, self.script, *self.args]

    def spawn(self) -> subprocess.Popen:
        """Start a fresh child."""
        self.process = subprocess.Popen(self.command(), env=child_environment(self.session_id))
        return self.process

    def stop_child(self, timeout: float = 5.0) -> None:
        """Terminate the running child, killing it if it will not exit."""
        process = self.process
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Child {process.pid} ignored SIGTERM, killing it")
            process.kill()
            process.wait()

    def restart(self) -> None:
        """Replace the running child with a new one."""
        with self._lock:
            logger.info(f"Source changed, restarting {self.script}")
            self.stop_child()
            self.spawn()
            self.restarts += 1

    def start_watching(self) -> None:
        handler = SourceChangeHandler(self, debounce_seconds=self.debounce_seconds)
        self._observer = Observer()
        for directory in self.watch_dirs:
            self._observer.schedule(handler, str(directory), recursive=True)
        self._observer.start()

    def stop(self) -> None:
        """Stop watching and terminate the child."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        with self._lock:
            self.stop_child()

    def run(self, poll_interval: float = 0.5) -> None:
        """Run until interrupted. A child that exits is restarted on the next change."""
        self.start_watching()
        self.spawn()
        try:
            while True:
                time.sleep(poll_interval)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
