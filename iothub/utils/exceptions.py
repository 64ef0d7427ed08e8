"""Custom exceptions for the IoT Hub backend"""

from typing import Optional


class IoTHubError(Exception):
    """Base exception for IoT Hub"""
    pass


class ValidationError(IoTHubError):
    """Malformed or missing input. The caller must retry with corrected input."""
    pass


class AuthError(IoTHubError):
    """Missing, invalid or expired token, or a password mismatch"""
    pass


class QuotaExceededError(IoTHubError):
    """Per-owner resource limit reached"""

    def __init__(self, message: str, limit: Optional[int] = None):
        self.limit = limit
        super().__init__(message)


class OwnershipError(IoTHubError):
    """Resource is missing or belongs to another owner"""
    pass


class NotFoundError(OwnershipError):
    """Ownership-filtered mutation matched nothing"""
    pass


class ConflictError(IoTHubError):
    """Duplicate unique key"""
    pass


class InternalError(IoTHubError):
    """Store or crypto failure. Details are logged, never returned to callers."""
    pass


class ConfigError(IoTHubError):
    """Configuration error"""
    pass
