"""
Custom exceptions for the MetaHire CRM API.
Services raise these; the handlers in main.py turn them into HTTP responses.
"""
from typing import Any, Optional

from fastapi import status


class CRMException(Exception):
    """Base exception for the CRM"""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(CRMException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ConflictError(CRMException):
    """Unique constraint or duplicate resource"""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str = "Resource", field: Optional[str] = None, value: Optional[str] = None, message: Optional[str] = None):
        if message is None:
            if field and value:
                message = f"{resource} with {field} '{value}' already exists"
            else:
                message = f"{resource} already exists"
        super().__init__(message)


class UnauthorizedError(CRMException):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(CRMException):
    """Access denied"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class ValidationError(CRMException):
    """Validation failed"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class StorageError(CRMException):
    """Storage collaborator failed"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message)


class PartialFailureError(CRMException):
    """
    The primary write succeeded but a dependent write did not.
    Raised when a lead was marked closed_won but its customer row could not
    be created; `lead` holds the updated lead so the caller can reconcile.
    """
    status_code = status.HTTP_207_MULTI_STATUS

    def __init__(self, message: str, lead: Any = None, cause: Optional[Exception] = None):
        self.lead = lead
        self.cause = cause
        super().__init__(message)
