"""
Shared error handling for the User Registry services.
"""

from typing import Dict, Any, Optional


class RegistryException(Exception):
    """Base exception for User Registry services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(RegistryException):
    """Business rule violations."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ConstraintViolationError(RegistryException):
    """Storage-level constraint violations, e.g. a duplicate unique value."""

    def __init__(self, message: str = "Constraint violated", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONSTRAINT_VIOLATION", message, details)


class DecodeError(RegistryException):
    """Malformed request bodies or corrupt cached payloads."""

    def __init__(self, message: str = "Failed to decode payload", details: Optional[Dict[str, Any]] = None):
        super().__init__("DECODE_ERROR", message, details)


class NotFoundError(RegistryException):
    """Missing or expired entries."""

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class BackendIOError(RegistryException):
    """Network or disk failures talking to a store or cache."""

    def __init__(self, backend: str, message: str = "I/O failure", details: Optional[Dict[str, Any]] = None):
        self.backend = backend
        super().__init__("IO_FAILURE", f"{backend}: {message}", details)
