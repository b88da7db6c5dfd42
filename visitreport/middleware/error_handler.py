"""
Global Error Handling
Anything a route lets escape becomes a JSON failure body instead of a crash
"""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Converts unhandled exceptions into `{ok: false, error}` with status 500."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"ok": False, "error": "Internal server error"})


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors: 400 with a readable message."""
    message = "; ".join(_describe(error) for error in exc.errors()) or "Invalid request"
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"ok": False, "error": message})
