"""
Custom exceptions for the client.
Transport, HTTP, storage and misuse failures are all defined here.
"""

from typing import Any, List, Optional


class AppException(Exception):
    """Base exception for all client exceptions."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: Optional[int] = None,
        details: Optional[List[str]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        super().__init__(self.message)


class NetworkError(AppException):
    """Raised when the request never produced an HTTP response."""

    def __init__(
        self,
        message: str = "Network error",
        details: Optional[List[str]] = None,
        code: str = "NETWORK_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=None,
            details=details
        )


class RequestTimeoutError(NetworkError):
    """Raised when the transport gives up waiting for the server."""

    def __init__(
        self,
        message: str = "Request timed out",
        details: Optional[List[str]] = None
    ):
        super().__init__(message=message, details=details, code="REQUEST_TIMEOUT")


class ApiError(AppException):
    """Raised when the backend answers with an HTTP error status."""

    def __init__(
        self,
        message: str = "API request failed",
        status_code: Optional[int] = 500,
        body: Any = None,
        code: str = "API_ERROR",
        details: Optional[List[str]] = None
    ):
        self.body = body
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details
        )


class AuthenticationError(ApiError):
    """Raised when the backend rejects the credentials (HTTP 401)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        body: Any = None,
        details: Optional[List[str]] = None
    ):
        super().__init__(
            message=message,
            status_code=401,
            body=body,
            code="AUTHENTICATION_ERROR",
            details=details
        )


class NotFoundError(ApiError):
    """Raised when a resource is not found (HTTP 404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        body: Any = None,
        resource_path: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=404,
            body=body,
            code="NOT_FOUND",
            details=[f"Path: {resource_path}"] if resource_path else None
        )


class ApiValidationError(ApiError):
    """Raised when the backend rejects the request payload (HTTP 400/422)."""

    def __init__(
        self,
        message: str = "Validation error",
        status_code: int = 422,
        body: Any = None,
        details: Optional[List[str]] = None
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            body=body,
            code="VALIDATION_ERROR",
            details=details
        )


class ResponseFormatError(ApiError):
    """Raised when a successful response body does not have the expected shape."""

    def __init__(
        self,
        message: str = "Unexpected response format",
        status_code: Optional[int] = None,
        body: Any = None,
        details: Optional[List[str]] = None
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            body=body,
            code="INVALID_RESPONSE",
            details=details
        )


class InvalidInputError(AppException):
    """Raised when caller input fails validation before any request is sent."""

    def __init__(
        self,
        message: str = "Invalid input",
        details: Optional[List[str]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_INPUT",
            details=details
        )


class StorageError(AppException):
    """Raised when the local session storage cannot be read or written."""

    def __init__(
        self,
        message: str = "Session storage operation failed",
        details: Optional[List[str]] = None
    ):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            details=details
        )


class ConfigurationError(AppException):
    """Raised when a component is used before it has been initialized."""

    def __init__(
        self,
        message: str = "Component not initialized",
        details: Optional[List[str]] = None
    ):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details
        )
