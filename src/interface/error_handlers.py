"""Map service exceptions onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.db_client import DatabaseError
from src.core.errors import classify_error_with_response, status_code_for


logger = logging.getLogger(__name__)


def _error_response(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc)
    error = classify_error_with_response(exc)

    log_level = logging.ERROR if status_code >= 500 else logging.INFO  # noqa: PLR2004
    logger.log(
        log_level,
        "api_error",
        extra={
            "path": request.url.path,
            "status_code": status_code,
            "code": error.code,
            "error": str(exc),
        },
    )
    return JSONResponse(status_code=status_code, content={"error": error.model_dump(mode="json")})


async def handle_service_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a classified error body for a service exception."""
    return _error_response(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers for the exception types services raise."""
    for exc_type in (ValueError, PermissionError, KeyError, DatabaseError):
        app.add_exception_handler(exc_type, handle_service_error)
