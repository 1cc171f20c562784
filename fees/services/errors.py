from contextlib import contextmanager

from django.db import InterfaceError, OperationalError
from rest_framework import status


class FeeServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "SERVER_ERROR"

    def __init__(self, message: str, status_code: int = None, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class ValidationError(FeeServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "MISSING_FIELDS"


class NotFound(FeeServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class StoreUnavailable(FeeServiceError):
    error_code = "STORE_UNAVAILABLE"


class IssuerError(FeeServiceError):
    error_code = "GENERATION_FAILED"


class IssuerAuthError(IssuerError):
    error_code = "AUTH_ERROR"


class IssuerTimeout(IssuerError):
    error_code = "TIMEOUT"


class IssuerNetworkError(IssuerError):
    error_code = "NETWORK_ERROR"


@contextmanager
def store_errors():
    """Re-raise database connectivity failures as StoreUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        raise StoreUnavailable(f"ledger store unavailable: {e}") from e
