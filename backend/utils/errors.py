"""
Application error taxonomy.

AppError carries an error code, HTTP status and optional details. Anything
that is not an AppError is treated as unexpected and reported as a generic
500 by the error handler.

Response body format:
    {"error": {"code": "...", "message": "...", "details": {...}}}
"""
from typing import Any, Dict, Optional


class ErrorCode:
    """Error codes shared by every endpoint"""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class AppError(Exception):
    """Known application error with a code and HTTP status"""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details


class ValidationError(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, 400, details)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: Optional[str] = None):
        message = f"{resource} with ID {resource_id} not found" if resource_id else f"{resource} not found"
        super().__init__(ErrorCode.NOT_FOUND, message, 404)


class ConflictError(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CONFLICT, message, 409, details)


class DatabaseError(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.DATABASE_ERROR, message, 500, details)


class PartialWriteError(DatabaseError):
    """
    A multi-store write failed after at least one store accepted it.

    Nothing is rolled back. details carries the document id plus the
    stores that were written and the one that failed, so the caller can
    reconcile. The underlying driver error is kept on .cause for logging
    and never sent to clients.
    """

    def __init__(self, document_id: str, written: list, failed: str, cause: Exception):
        super().__init__(
            f"Document {document_id} partially written: {failed} failed after {', '.join(written)}",
            details={
                "document_id": document_id,
                "written": list(written),
                "failed": failed,
            },
        )
        self.cause = cause


class InvalidStatusTransitionError(AppError):
    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Invalid status transition from {current_status} to {new_status}",
            400,
        )


def to_error_response(error: Exception) -> dict:
    """Convert any exception to the API error body"""
    if isinstance(error, AppError):
        body = {"code": error.code, "message": error.message}
        if error.details:
            body["details"] = error.details
        return {"error": body}

    return {
        "error": {
            "code": ErrorCode.INTERNAL_SERVER_ERROR,
            "message": "An unexpected error occurred",
        }
    }
