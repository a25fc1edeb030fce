"""Render every error in the service's ``{success: false, message}`` envelope."""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.client.schemas import ErrorResponse
from src.shared.exceptions import AuthenticationError, UpstreamAuthError
from src.sales.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


def describe_validation_error(exc: RequestValidationError) -> str:
    """Summarize request validation errors as 'field: reason' pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI, is_production: bool) -> None:
    """Install the envelope-producing exception handlers on the application."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return error_response(exc.status_code, f"Route {request.method} {request.url.path} not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = describe_validation_error(exc)
        logger.warning(f"{request.method} {request.url.path} rejected: {message}")
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(UpstreamAuthError)
    async def upstream_auth_error_handler(request: Request, exc: UpstreamAuthError):
        # The main backend's answer is passed through unchanged
        return JSONResponse(status_code=exc.status_code, content=exc.body)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        message = "Internal server error" if is_production else str(exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)
