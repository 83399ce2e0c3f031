"""
FastAPI middleware for request correlation and logging.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestCorrelationMiddleware(BaseHTTPMiddleware):
    """
    Assigns every request an ID and logs its duration.

    The ID is taken from the incoming header when present, stored on
    request.state.request_id and echoed in the response header.
    """

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(f"Request started: {request.method} {request.url.path}")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"- Error: {type(e).__name__} - Duration: {duration_ms:.2f}ms",
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers[self.header_name] = request_id
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Duration: {duration_ms:.2f}ms",
            extra={"duration_ms": duration_ms},
        )
        return response


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """
    Attaches request_id, http_method and request_path to every log record
    emitted while a request is processed.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = getattr(request.state, "request_id", None)
        old_factory = logging.getLogRecordFactory()

        def record_factory(*args, **kwargs):
            record = old_factory(*args, **kwargs)
            # Values passed through extra={} take precedence
            if request_id and not hasattr(record, "request_id"):
                record.request_id = request_id
            if not hasattr(record, "http_method"):
                record.http_method = request.method
            if not hasattr(record, "request_path"):
                record.request_path = request.url.path
            return record

        logging.setLogRecordFactory(record_factory)
        try:
            return await call_next(request)
        finally:
            logging.setLogRecordFactory(old_factory)
