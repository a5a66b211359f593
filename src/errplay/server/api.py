"""
Development collector.
Receives error payloads from errplay clients and prints them to the terminal.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from pydantic import BaseModel

from ..config import config
from .formatting import log_error_payload

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


class HealthResponse(BaseModel):
    status: str
    environment: str
    endpoint: str


def is_development_post_request(method: str, environment: Optional[str] = None) -> bool:
    """True for a POST while running in development."""
    environment = environment if environment is not None else config.environment
    if environment != "development":
        return False
    return (method or "").upper() == "POST"


def create_app(endpoint: Optional[str] = None, environment: Optional[str] = None) -> FastAPI:
    """Create and configure the collector app."""
    endpoint = endpoint or config.endpoint
    environment = environment if environment is not None else config.environment

    app = FastAPI(
        title="errplay collector",
        description="Receives client error payloads during development",
        version="0.1.0",
    )

    @app.api_route(endpoint, methods=ALL_METHODS)
    async def collect(request: Request) -> Response:
        """
        Log one error payload.

        Development POST -> 204, even when the body is malformed.
        Anything else -> 404.
        """
        if not is_development_post_request(request.method, environment):
            return Response(status_code=404)
        try:
            body = await request.json()
            log_error_payload(body)
        except Exception as e:
            logger.error(f"errplay: Failed to parse error log body: {e}")
        return Response(status_code=204)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", environment=environment, endpoint=endpoint)

    return app


app = create_app()
