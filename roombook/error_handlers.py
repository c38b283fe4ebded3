import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _error_body(request: Request, message: str, **extra) -> dict:
    body = {
        "error": message,
        "detail": message,
        "path": str(request.url.path),
    }
    body.update(extra)
    return body


def register_exception_handlers(app):
    """
    Register global exception handlers for standardized error responses.

    Every error body carries ``error`` (the message clients display),
    ``detail`` and ``path``.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(err.get("type") == "missing" for err in errors):
            message = "Missing required fields"
        else:
            message = "Invalid request data"
        return JSONResponse(
            status_code=400,
            content=_error_body(request, message, errors=jsonable_encoder(errors)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        # internal error text stays in the log, never in the response
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "An unexpected error occurred"),
        )
