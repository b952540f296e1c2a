from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import traceback
import uuid

from group_polls.core.constants import ErrorCodes, ErrorMessages

logger = logging.getLogger(__name__)


# =============================================================================
# Domain errors
# =============================================================================

class DomainError(Exception):
    """
    Base class for rule violations raised by the service layer.

    Services know nothing about HTTP; each subclass only carries the status
    code the API layer should answer with and a stable error code.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCodes.BAD_REQUEST

    def __init__(self, message: str, error_code: Optional[str] = None, **context: Any):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.context = context

    def to_detail(self) -> Dict[str, Any]:
        return {"message": self.message, "error_code": self.error_code, **self.context}

    def to_http_exception(self) -> HTTPException:
        headers = None
        if self.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return HTTPException(status_code=self.status_code, detail=self.to_detail(), headers=headers)


class BadRequestError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCodes.BUSINESS_RULE_VIOLATION


class UnauthorizedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCodes.AUTH_ERROR


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCodes.INSUFFICIENT_PERMISSIONS


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCodes.RESOURCE_NOT_FOUND


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCodes.DUPLICATE_RESOURCE


class InternalError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = ErrorCodes.INTERNAL_ERROR


# =============================================================================
# Exception handlers
# =============================================================================

def _new_request_id() -> str:
    return str(uuid.uuid4())[:8]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handler for Pydantic validation errors raised outside request parsing."""
    request_id = _new_request_id()
    client_ip = request.client.host if request.client else "unknown"

    logger.warning(
        f"Validation error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"IP: {client_ip} - "
        f"Errors: {len(exc.errors())}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": ErrorMessages.VALIDATION_ERROR,
            "error_code": ErrorCodes.VALIDATION_ERROR,
            "errors": exc.errors(include_url=False, include_context=False),
            "timestamp": _now(),
            "path": str(request.url.path),
            "request_id": request_id
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    HTTP exception handler

    Endpoints raise HTTPException with a dict detail ({message, error_code, ...});
    this handler flattens it and stamps timestamp, path and request id.
    """
    request_id = _new_request_id()
    client_ip = request.client.host if request.client else "unknown"

    if exc.status_code >= 500:
        logger.error(
            f"Server error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip} - "
            f"Detail: {exc.detail}"
        )
    elif exc.status_code >= 400:
        logger.warning(
            f"Client error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip}"
        )

    if isinstance(exc.detail, dict):
        response_content = {
            **exc.detail,
            "timestamp": _now(),
            "path": str(request.url.path),
            "request_id": request_id
        }
    else:
        response_content = {
            "message": str(exc.detail),
            "error_code": "HTTP_ERROR",
            "timestamp": _now(),
            "path": str(request.url.path),
            "request_id": request_id
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=response_content,
        headers=getattr(exc, "headers", None)
    )


async def domain_exception_handler(request: Request, exc: DomainError):
    """Handler for domain errors that escaped an endpoint without conversion."""
    return await http_exception_handler(request, exc.to_http_exception())


async def database_exception_handler(request: Request, exc: Exception):
    """Handler for database-related exceptions"""
    request_id = _new_request_id()

    logger.error(
        f"Database error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__}"
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": ErrorMessages.DATABASE_ERROR,
            "error_code": ErrorCodes.DATABASE_ERROR,
            "timestamp": _now(),
            "path": str(request.url.path),
            "request_id": request_id,
            "hint": "Please try again later or contact support"
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for unexpected errors"""
    request_id = _new_request_id()
    tb_str = traceback.format_exc()

    logger.critical(
        f"Unexpected error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"Traceback: {tb_str}"
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": ErrorMessages.INTERNAL_ERROR,
            "error_code": ErrorCodes.INTERNAL_ERROR,
            "timestamp": _now(),
            "path": str(request.url.path),
            "request_id": request_id
        }
    )
