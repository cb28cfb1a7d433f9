"""
Custom exception hierarchy for type-safe error handling

Provides a structured exception hierarchy that maps to HTTP status codes
and enables consistent error responses across the application.

Usage:
    from app.error_handlers.exceptions import ValidationException

    def parse_request(data):
        if not data:
            raise ValidationException('Request body is required')

Exception Hierarchy:
    AppException (base)
    ├── ValidationException (400)
    ├── ConfigurationException (500, 400 for missing credentials)
    ├── DatabaseException (500)
    └── ExternalAPIException (502)
        └── PhorestAPIError
            └── CircuitOpenError
"""
from typing import Dict, Any, Optional


class AppException(Exception):
    """
    Base exception for all application errors

    Attributes:
        status_code: HTTP status code for the error
        error_type: String identifier for the error type
        message: Human-readable error message
        details: Additional context about the error
    """
    status_code = 500
    error_type = 'ApplicationError'

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to JSON-serializable dictionary

        The message goes under ``error`` so callers of the sync trigger can
        read a single field.
        """
        result = {
            'error': self.message,
            'error_type': self.error_type,
            'status_code': self.status_code
        }

        if self.details:
            result.update(self.details)

        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}('{self.message}', status_code={self.status_code})>"


class ValidationException(AppException):
    """
    Validation errors (HTTP 400)

    Raised when request data fails validation checks.

    Example:
        >>> if sync_type not in SYNC_TYPES:
        ...     raise ValidationException(f'Invalid sync_type: {sync_type}')
    """
    status_code = 400
    error_type = 'ValidationError'


class ConfigurationException(AppException):
    """
    Configuration errors (HTTP 500)

    Raised when application is misconfigured.
    """
    status_code = 500
    error_type = 'ConfigurationError'


class DatabaseException(AppException):
    """
    Database errors (HTTP 500)

    Raised when a query or commit fails outside the per-row upserts.
    """
    status_code = 500
    error_type = 'DatabaseError'


class ExternalAPIException(AppException):
    """
    External API call errors (HTTP 502)

    Raised when external API calls fail.
    """
    status_code = 502
    error_type = 'ExternalAPIError'


class PhorestAPIError(ExternalAPIException):
    """
    Failure talking to the Phorest third-party API

    Attributes:
        api_status_code: HTTP status returned by Phorest, None for transport errors
        response_body: Raw response text (truncated by the gateway)
        endpoint: Relative endpoint that failed
    """
    error_type = 'PhorestAPIError'

    def __init__(
        self,
        message: str,
        api_status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        endpoint: Optional[str] = None
    ):
        super().__init__(message, details={
            'api_status_code': api_status_code,
            'endpoint': endpoint,
        })
        self.api_status_code = api_status_code
        self.response_body = response_body
        self.endpoint = endpoint


class CircuitOpenError(PhorestAPIError):
    """Raised without a network call while a branch's circuit breaker is open"""
    error_type = 'CircuitOpen'

    def __init__(self, branch_id: str, failures: int, endpoint: Optional[str] = None):
        super().__init__(
            f"Circuit open for branch {branch_id} after {failures} consecutive failures",
            endpoint=endpoint
        )
        self.branch_id = branch_id
        self.failures = failures
