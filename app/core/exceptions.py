# app/core/exceptions.py
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base for errors raised by the delivery and rating engines"""
    error_code = "domain_error"
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        detail: Dict[str, Any] = {"message": message, "error_code": self.error_code}
        if details:
            detail.update(details)
        super().__init__(status_code=self.status_code_default, detail=detail)


class ValidationError(DomainError):
    error_code = "validation_error"
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation error", errors: Optional[List[Dict[str, str]]] = None):
        self.errors = errors or []
        super().__init__(message, {"errors": self.errors})

    @classmethod
    def for_field(cls, path: str, message: str) -> "ValidationError":
        return cls(errors=[{"path": path, "message": message}])

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Convert a pydantic ValidationError into {path, message} pairs"""
        return cls(errors=format_error_list(exc.errors()))


class NotFound(DomainError):
    error_code = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND


class Forbidden(DomainError):
    error_code = "forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN


class InvalidTransition(DomainError):
    error_code = "invalid_transition"
    status_code_default = status.HTTP_400_BAD_REQUEST


class InvalidState(DomainError):
    error_code = "invalid_state"
    status_code_default = status.HTTP_400_BAD_REQUEST


class Conflict(DomainError):
    error_code = "conflict"
    status_code_default = status.HTTP_409_CONFLICT


class StorageError(DomainError):
    """Unexpected persistence failure; the cause is logged, never returned"""
    error_code = "internal_error"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal storage failure"):
        super().__init__(message)


def format_error_list(errors) -> List[Dict[str, str]]:
    """pydantic/FastAPI error dicts -> [{"path": "a.b", "message": "..."}]"""
    formatted = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        formatted.append({
            "path": ".".join(location),
            "message": error.get("msg", "Invalid value")
        })
    return formatted
