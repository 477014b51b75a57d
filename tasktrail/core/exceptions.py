"""
Error types for the TaskTrail API and the helpers services use to turn them
into HTTP responses.
"""
from typing import Optional, Sequence

from fastapi import HTTPException, status


class TaskTrailException(Exception):
    """Base class; message is what ends up in the response detail."""
    def __init__(self, message: str = "Something went wrong"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(TaskTrailException):
    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        if resource_id:
            super().__init__(f"{resource} with id '{resource_id}' not found")
        else:
            super().__init__(f"{resource} not found")


class AlreadyExistsError(TaskTrailException):
    def __init__(self, resource: str, field: str, value: str):
        super().__init__(f"{resource} with {field} '{value}' already exists")


class ForbiddenError(TaskTrailException):
    """The user is known but their role does not allow the operation."""
    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class InvalidChoiceError(TaskTrailException):
    """A status, priority, role or similar field got a value outside its vocabulary."""
    def __init__(self, field: str, value: str, allowed: Sequence[str]):
        self.field = field
        self.allowed = list(allowed)
        super().__init__(f"Invalid {field} '{value}', expected one of: {', '.join(allowed)}")


class InvalidFieldError(TaskTrailException):
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class StateConflictError(TaskTrailException):
    """The record exists but is no longer in a state that allows the change."""
    def __init__(self, message: str):
        super().__init__(message)


# HTTP helpers
def raise_not_found(resource: str = "Resource", resource_id: Optional[str] = None):
    """Raise 404"""
    err = NotFoundError(resource, resource_id)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=err.message)


def raise_already_exists(resource: str, field: str, value: str):
    """Raise 400 for a duplicate unique value"""
    err = AlreadyExistsError(resource, field, value)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err.message)


def raise_unauthorized(message: str = "Could not validate credentials"):
    """Raise 401 with the bearer challenge header"""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def raise_forbidden(message: str = "Permission denied"):
    """Raise 403"""
    err = ForbiddenError(message)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=err.message)


def raise_conflict(message: str):
    """Raise 409"""
    err = StateConflictError(message)
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=err.message)


def raise_invalid_choice(field: str, value: str, allowed: Sequence[str]):
    """Raise 422 for a value outside a fixed vocabulary"""
    err = InvalidChoiceError(field, value, allowed)
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=err.message)


def raise_validation_error(message: str, field: str):
    """Raise 422 for any other bad field value"""
    err = InvalidFieldError(field, message)
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=err.message)
