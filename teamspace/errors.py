"""Exception handlers that render every failure in the response envelope."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamspace.config import settings
from teamspace.models import InvalidTransition

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def _field_name(location) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return error_response(exc.status_code, "Route not found")
    response = error_response(exc.status_code, str(exc.detail))
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    if settings.is_production:
        return error_response(status.HTTP_400_BAD_REQUEST, "Validation Error")
    details = [{"field": _field_name(error["loc"]), "message": error["msg"]} for error in exc.errors()]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation Error", details=details)


async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    if settings.is_production:
        return error_response(status.HTTP_400_BAD_REQUEST, "Database error")
    return error_response(status.HTTP_400_BAD_REQUEST, "Database error", details=str(exc.__cause__ or exc))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    show_detail = settings.DEBUG and not settings.is_production
    message = (str(exc) if show_detail else "") or "Internal Server Error"
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InvalidTransition, invalid_transition_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
