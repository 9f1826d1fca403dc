# server/askbudi/errors.py
"""Error taxonomy.

Every error is an ``HTTPException`` so FastAPI short-circuits on raise; the
handlers installed by ``install_error_handlers`` render them as
``{"error": message}``.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


class ValidationError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class AuthError(HTTPException):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(status_code=401, detail=message)


class NotFoundError(HTTPException):
    def __init__(self, message: str = "Not found"):
        super().__init__(status_code=404, detail=message)


class QuotaExceededError(HTTPException):
    def __init__(self, used: int, limit: int, window_days: int = 30):
        self.used = used
        self.limit = limit
        super().__init__(
            status_code=429,
            detail=(
                f"Quota exceeded. Used {used}/{limit} requests "
                f"in the last {window_days} days."
            ),
        )


class InternalError(HTTPException):
    def __init__(self, message: str = GENERIC_ERROR_MESSAGE):
        super().__init__(status_code=500, detail=message)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p not in ("query", "body", "path", "header")]
        field = ".".join(loc)
        msg = error.get("msg", "invalid value")
        if error.get("type") == "missing" and field:
            parts.append(f"{field} parameter is required")
        elif field:
            parts.append(f"{field}: {msg}")
        else:
            parts.append(msg)
    return "; ".join(parts) or "Invalid request"


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"error": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": _format_validation_errors(exc)}, status_code=400)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": GENERIC_ERROR_MESSAGE}, status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
