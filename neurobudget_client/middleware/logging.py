"""
Logging hooks for outgoing HTTP requests and responses.
"""

import time
from typing import Dict

import httpx
import structlog

logger = structlog.get_logger()

START_TIME_EXTENSION = "neurobudget.start_time"


class LoggingHooks:
    """httpx event hooks that log every request and its response."""

    async def on_request(self, request: httpx.Request) -> None:
        """Log request start. Headers are left out so tokens never reach the logs."""
        request.extensions[START_TIME_EXTENSION] = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query_params=str(request.url.query, "ascii") if request.url.query else "",
            authenticated="authorization" in request.headers
        )

    async def on_response(self, response: httpx.Response) -> None:
        """Log response status and processing time."""
        request = response.request
        start_time = request.extensions.get(START_TIME_EXTENSION)
        process_time = time.time() - start_time if start_time is not None else 0.0

        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=f"{process_time:.4f}s"
        )

    def as_event_hooks(self) -> Dict[str, list]:
        """Hooks in the shape httpx.AsyncClient expects."""
        return {"request": [self.on_request], "response": [self.on_response]}
