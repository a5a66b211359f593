"""
Fire-and-forget delivery of payloads to the collector.
"""

import json
import logging
import threading
from typing import Any, Dict, Optional, Protocol

import httpx

from ..config import config

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Non-blocking, best-effort submission with no delivery confirmation."""

    def send(self, payload: Dict[str, Any]) -> None: ...


def resolve_endpoint(endpoint: str, base_url: Optional[str] = None) -> str:
    """Resolve a relative endpoint such as ``/__dev__/errors`` against the collector URL."""
    return str(httpx.URL(base_url or config.collector_url).join(endpoint))


class BeaconTransport:
    """
    POSTs each payload on its own non-daemon thread.

    Interpreter shutdown joins non-daemon threads, so a payload submitted just
    before the process exits is still delivered. Responses are never inspected.
    """

    def __init__(
        self,
        endpoint: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.url = resolve_endpoint(endpoint, base_url)
        self.timeout = timeout if timeout is not None else config.transport_timeout
        self.client = client

    def send(self, payload: Dict[str, Any]) -> None:
        """Submit a payload and return immediately."""
        try:
            body = json.dumps(payload)
            thread = threading.Thread(
                target=self._post,
                args=(body,),
                name="errplay-beacon",
                daemon=False,
            )
            thread.start()
        except Exception as e:
            logger.debug(f"errplay: Could not submit error payload: {e}")

    def _post(self, body: str) -> None:
        headers = {"Content-Type": "application/json"}
        try:
            if self.client is not None:
                self.client.post(self.url, content=body, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    client.post(self.url, content=body, headers=headers)
        except Exception as e:
            # Nobody is waiting on the result; keep it out of the excepthooks.
            logger.debug(f"errplay: Delivery to {self.url} failed: {e}")
