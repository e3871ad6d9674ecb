"""
Custom exceptions for the translator client.
"""

from datetime import datetime
from typing import Optional, Dict, Any


class TranslatorClientException(Exception):
    """Base exception for translator client errors."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "SYSTEM_ERROR"
        self.details = details or {}


class ValidationError(TranslatorClientException):
    """Exception for request validation errors."""

    def __init__(self, message: str, field: str = None, details: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class AuthError(TranslatorClientException):
    """Exception for a failed or unparseable credential exchange."""

    def __init__(self, message: str = "Credential exchange failed", details: Dict[str, Any] = None):
        super().__init__(message, "AUTH_ERROR", details)


class TokenExpiredError(TranslatorClientException):
    """Exception for operations attempted with an expired access token."""

    def __init__(self, message: str = "Access token is invalid, please get new token",
                 deadline: Optional[datetime] = None, details: Dict[str, Any] = None):
        details = details or {}
        if deadline is not None:
            details["deadline"] = deadline.isoformat()
        super().__init__(message, "TOKEN_EXPIRED", details)
        self.deadline = deadline


class ProviderError(TranslatorClientException):
    """Exception for transport or wire-format failures talking to the provider."""

    def __init__(self, message: str, operation: str = None, status_code: int = None,
                 details: Dict[str, Any] = None):
        details = details or {}
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, "PROVIDER_ERROR", details)
        self.operation = operation
        self.status_code = status_code


class CacheError(TranslatorClientException):
    """Exception for cache operations."""

    def __init__(self, message: str, cache_key: str = None, details: Dict[str, Any] = None):
        super().__init__(message, "CACHE_ERROR", details)
        self.cache_key = cache_key


class ConfigurationError(TranslatorClientException):
    """Exception for configuration errors."""

    def __init__(self, message: str, config_key: str = None, details: Dict[str, Any] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)
        self.config_key = config_key


def create_error_response(exception: TranslatorClientException, include_details: bool = True) -> Dict[str, Any]:
    """Create standardized error response from exception."""
    response = {
        "error": {
            "code": exception.error_code,
            "message": exception.message
        }
    }

    if include_details and exception.details:
        response["error"]["details"] = exception.details

    return response
