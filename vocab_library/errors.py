from __future__ import annotations


class LibraryError(Exception):
    """Base error raised by library operations."""

    def __init__(self, message: str, code: str = 'LIBRARY_ERROR', status_code: int = 400):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {'ok': False, 'error': self.message, 'code': self.code}


class CapacityExceededError(LibraryError):
    """Adding would push a collection past its hard cap."""

    def __init__(self, message: str, limit: int | None = None):
        super().__init__(message, code='CAPACITY_EXCEEDED', status_code=409)
        self.limit = limit


class ValidationError(LibraryError, ValueError):
    """Input rejected before any state change."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, code='VALIDATION_ERROR', status_code=400)
        self.field = field
