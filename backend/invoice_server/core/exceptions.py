"""
Secure exception handling to prevent information leakage.

SECURITY PRINCIPLE: Don't expose internal details to users.
Use specific messages for errors the caller can fix (4xx), generic
messages externally for everything else, detailed logging internally.

Every error leaves the API as JSON:
    {"error": str, "message"?: str, "details"?: [str]}
"""
import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from invoice_server.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status and a JSON body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal server error"

    def __init__(
        self,
        error: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[List[str]] = None,
    ):
        self.error = error or self.error
        self.message = message
        self.details = details
        super().__init__(message or self.error)

    def to_body(self) -> dict:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation error"


class InvalidReference(AppError):
    """A foreign key in the payload points at nothing the caller may use."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid reference"


class InvalidClient(InvalidReference):
    error = "Invalid client"

    def __init__(self, message: str = "The specified client does not exist"):
        super().__init__(message=message)


class InvalidBillFromAddress(InvalidReference):
    error = "Invalid bill from address"

    def __init__(
        self,
        message: str = "The specified bill from address does not exist or does not belong to you",
    ):
        super().__init__(message=message)


class InvalidInvoice(InvalidReference):
    error = "Invalid invoice"

    def __init__(
        self,
        message: str = "The specified invoice does not exist or does not belong to you",
    ):
        super().__init__(message=message)


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Resource already exists"


class DuplicateInvoiceNumber(Conflict):
    error = "Invoice number already exists"

    def __init__(self, invoice_number: Optional[str] = None):
        self.invoice_number = invoice_number
        super().__init__(message="An invoice with this number already exists")


class DependencyConflict(Conflict):
    """Delete refused because other rows still reference the target."""


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Authentication failed"


class InvalidToken(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Invalid or expired token."


class InternalError(AppError):
    pass


class BusinessError:
    """Business-domain exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> NotFound:
        """
        404 naming the resource type, never its owner.

        SECURITY: Returns same response whether the row doesn't exist or
        belongs to someone else. This prevents IDOR enumeration attacks.

        Example:
            if not client:
                raise BusinessError.not_found("Client")
        """
        if reason:
            logger.warning(f"Access denied / not found: {resource} - {reason}")

        return NotFound(error=f"{resource} not found")

    @staticmethod
    def unauthorized(reason: str = "", message: Optional[str] = None) -> Unauthorized:
        """
        Generic 401 for all authentication failures.

        SECURITY: Same response for wrong password, non-existent user, etc.
        Prevents user enumeration attacks.
        """
        logger.warning(f"Unauthorized access attempt: {reason}")
        return Unauthorized(message=message)

    @staticmethod
    def forbidden(reason: str = "", error: str = "Invalid or expired token.") -> InvalidToken:
        """403 for tokens that are present but unusable."""
        logger.warning(f"Forbidden access: {reason}")
        return InvalidToken(error=error)

    @staticmethod
    def conflict(detail: str, message: Optional[str] = None) -> Conflict:
        """
        409 for resource conflicts.
        Example: "User already exists"
        """
        logger.info(f"Conflict: {detail}")
        return Conflict(error=detail, message=message)

    @staticmethod
    def dependency_conflict(detail: str, message: str) -> DependencyConflict:
        """409 for deletes blocked by rows that still reference the target."""
        logger.info(f"Delete blocked: {detail} - {message}")
        return DependencyConflict(error=detail, message=message)

    @staticmethod
    def server_error(original_error: Exception = None, error: str = "Internal server error") -> InternalError:
        """
        500 - logs actual error internally.

        SECURITY: The original message only reaches the caller in development.
        Never expose stack traces, SQL errors, or internal paths in production.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        if settings.DEBUG and original_error is not None:
            message = str(original_error)
        else:
            message = "Something went wrong"
        return InternalError(error=error, message=message)


def _format_validation_error(err: dict) -> str:
    # Drop the "body" prefix FastAPI adds to payload locations
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]
    field = ".".join(loc)
    msg = err.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [_format_validation_error(err) for err in exc.errors()]
    logger.info(f"Validation failed on {request.method} {request.url.path}: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationFailed(details=details).to_body(),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        body = {"error": "Route not found", "message": f"Cannot {request.method} {request.url.path}"}
    else:
        body = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


def is_unique_violation(exc: IntegrityError) -> bool:
    """UNIQUE (or primary key) violation, as opposed to FK, CHECK or NOT NULL."""
    # PostgreSQL reports SQLSTATE 23505; SQLite and MySQL only say so in the message
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate" in text


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    if not is_unique_violation(exc):
        # FK, CHECK and NOT NULL failures take the 500 path
        error = BusinessError.server_error(exc)
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    logger.warning(f"Unique constraint hit on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=Conflict(message="A record with this information already exists").to_body(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = BusinessError.server_error(exc)
    return JSONResponse(status_code=error.status_code, content=error.to_body())


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
