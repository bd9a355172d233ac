"""
Error taxonomy for the HR Personnel Service and its HTTP mapping.

Every error response body has the shape ``{"message": "..."}``. Internal
failures are logged with full detail but never echoed to the caller.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger
from app.core.validation import validation_message

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base exception for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Missing or malformed input. Detected before any store I/O."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad Request."


class NotFoundOrInactive(ServiceError):
    """Entity absent, or not in the ACTIVE lifecycle state.

    Callers cannot tell the two cases apart.
    """

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Employee not found."


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden."


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."


class InternalError(ServiceError):
    """Store or transport failure. Details stay in the logs."""


class DecryptionError(Exception):
    """Raised when a ciphertext cannot be decrypted.

    Never surfaced as a request failure; callers substitute a marker value.
    """


class EncryptionError(Exception):
    """Raised when the encryption service is misconfigured or fails."""


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers rendering the taxonomy as ``{"message": ...}`` bodies."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if isinstance(exc, InternalError):
            # The message of an InternalError may carry store details
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": InternalError.default_message},
            )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = validation_message(exc.errors())
        logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error during {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": InternalError.default_message},
        )
