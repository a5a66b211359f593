"""
Durable queue of error payloads that survives a process restart.
"""

import json
import logging
import threading
from typing import Any, Dict, List

from ..storage import SessionStore

logger = logging.getLogger(__name__)

QUEUE_KEY = "__errplay"


class DurableQueue:
    """
    Ordered sequence of payloads persisted as one JSON array under QUEUE_KEY.

    Nothing here raises into the caller: unreadable or corrupt data is treated
    as an empty queue and reported as a warning. Capture points fire on any
    thread, so every read-modify-write holds the queue lock.
    """

    def __init__(self, store: SessionStore, key: str = QUEUE_KEY):
        self.store = store
        self.key = key
        # Reentrant: a store backend that logs an error re-enters enqueue.
        self._lock = threading.RLock()

    def _read(self) -> List[Dict[str, Any]]:
        raw = self.store.get_item(self.key)
        if not raw:
            return []
        stored = json.loads(raw)
        if not isinstance(stored, list):
            raise ValueError(f"expected a JSON array under {self.key!r}, got {type(stored).__name__}")
        return stored

    def enqueue(self, payload: Dict[str, Any]) -> bool:
        """
        Append one payload (read-modify-write).

        Returns False when the payload could not be persisted.
        """
        with self._lock:
            try:
                try:
                    stored = self._read()
                except ValueError as e:
                    logger.warning(f"errplay: Discarding corrupt stored errors: {e}")
                    stored = []
                stored.append(payload)
                self.store.set_item(self.key, json.dumps(stored))
                return True
            except Exception as e:
                logger.warning(f"errplay: Failed to store error in session storage: {e}")
                return False

    def peek(self) -> List[Dict[str, Any]]:
        """Return the persisted payloads without clearing them."""
        with self._lock:
            try:
                return self._read()
            except Exception as e:
                logger.warning(f"errplay: Failed to read stored errors: {e}")
                return []

    def drain_all(self) -> List[Dict[str, Any]]:
        """
        Return every persisted payload in enqueue order and clear the store.

        The store is cleared only after a successful read; absent, empty, or
        corrupt data yields an empty list.
        """
        with self._lock:
            try:
                stored = self._read()
            except Exception as e:
                logger.warning(f"errplay: Failed to flush stored errors: {e}")
                return []
            if not stored:
                return []
            try:
                self.store.remove_item(self.key)
            except Exception as e:
                logger.warning(f"errplay: Failed to clear stored errors: {e}")
            return stored
