"""
FastAPI middleware for request logging and error handling.
"""

import time
from typing import Any, Callable, Dict, Mapping

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


def request_log_context(headers: Mapping[str, str]) -> Dict[str, Any]:
    """
    Relay fields carried by every log line of a request.

    The envelope addresses come from the X-Email-From / X-Email-To headers the
    relay sets; absent headers are left out rather than logged as empty.
    """
    context: Dict[str, Any] = {}
    for header, key in (("x-email-from", "email_from"), ("x-email-to", "email_to")):
        value = (headers.get(header) or "").strip()
        if value:
            context[key] = value

    length = headers.get("content-length")
    if length and length.isdigit():
        context["content_length"] = int(length)
    return context


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Setup request/response logging middleware.

    Logs every request with method, path, status code and processing time,
    and adds an X-Process-Time header to the response. Relay context from
    request_log_context is bound for the duration of the request, so log
    lines from the parser and the webhook client carry it as well.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        with structlog.contextvars.bound_contextvars(**request_log_context(request.headers)):
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None,
            )

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "Request failed",
                    method=request.method,
                    path=request.url.path,
                    process_time_ms=round((time.time() - start_time) * 1000, 2),
                    error=str(e),
                    exc_info=True,
                )
                raise

            process_time = time.time() - start_time
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=round(process_time * 1000, 2),
            )
        response.headers["X-Process-Time"] = str(process_time)
        return response


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Setup global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error=str(e),
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "detail": str(e) if app.debug else "An unexpected error occurred",
                },
            )
