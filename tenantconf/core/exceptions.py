"""
tenantconf Exception Hierarchy

Provides typed exceptions for the storage layer and its configuration.
All tenantconf-specific exceptions inherit from TenantConfError.

Exception Hierarchy:
    TenantConfError (base)
    ├── ConfigurationError (invalid service settings)
    │   └── BackendSelectionError (unknown storage provider)
    └── StorageError (storage backend errors)
        ├── SourceUnavailableError (source could not be loaded at startup)
        ├── ReloadError (reload failed, previous data retained)
        └── BackendError (per-call failure talking to the store)

Absence of data is not an error: lookups return None or an empty list.

Usage:
    from tenantconf.core.exceptions import ReloadError

    try:
        await storage.reload_config()
    except ReloadError as e:
        # Previous data is still being served
        logger.warning(f"Reload failed: {e}")
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


# ============================================================================
# Base Exception
# ============================================================================

@dataclass
class ErrorContext:
    """
    Additional context for debugging errors.

    Attributes:
        backend: Name of the storage backend involved
        operation: What operation was being performed
        correlation_id: Request correlation ID for tracing
        timestamp: When the error occurred
        metadata: Additional debugging information
    """
    backend: Optional[str] = None
    operation: Optional[str] = None
    correlation_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "backend": self.backend,
            "operation": self.operation,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class TenantConfError(Exception):
    """
    Base exception for all tenantconf errors.

    Attributes:
        message: Human-readable error message
        context: Additional debugging context
        recoverable: Whether the operation can be retried
        cause: Original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        recoverable: bool = False,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.recoverable = recoverable
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.context.backend:
            parts.append(f"[backend={self.context.backend}]")
        if self.context.operation:
            parts.append(f"[op={self.context.operation}]")
        if self.context.correlation_id:
            parts.append(f"[corr={self.context.correlation_id}]")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logs."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(TenantConfError):
    """
    Raised when service settings are invalid.

    This is NOT recoverable without fixing configuration.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, context, recoverable=False, cause=cause)
        self.config_key = config_key


class BackendSelectionError(ConfigurationError):
    """Raised when the requested storage provider is not registered."""

    def __init__(
        self,
        provider: str,
        available: Optional[list[str]] = None,
        context: Optional[ErrorContext] = None,
    ):
        available = available or []
        super().__init__(
            f"Unknown storage provider: {provider}. Available: {', '.join(sorted(available))}",
            config_key="storage",
            context=context,
        )
        self.provider = provider
        self.available = available


# ============================================================================
# Storage Errors
# ============================================================================

class StorageError(TenantConfError):
    """Base class for storage backend errors."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        recoverable: bool = False,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext()
        if provider and not context.backend:
            context.backend = provider
        super().__init__(message, context, recoverable=recoverable, cause=cause)
        self.provider = provider


class SourceUnavailableError(StorageError):
    """
    Raised when a backend cannot load its source of truth at construction.

    This is NOT recoverable: the backend must not start with partial data.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        provider: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, provider, context, recoverable=False, cause=cause)
        self.source = source


class ReloadError(StorageError):
    """
    Raised when a reload fails. The previously loaded data is retained.

    This is RECOVERABLE - fix the source and reload again.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        provider: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, provider, context, recoverable=True, cause=cause)
        self.source = source


class BackendError(StorageError):
    """
    Raised when a call to the backing store fails (network, throttling,
    malformed item).

    This is RECOVERABLE - the next call may succeed.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext()
        if operation and not context.operation:
            context.operation = operation
        super().__init__(message, provider, context, recoverable=True, cause=cause)
        self.operation = operation


# ============================================================================
# Helper Functions
# ============================================================================

def is_recoverable(error: Exception) -> bool:
    """
    Check if an error is recoverable.

    Args:
        error: The exception to check

    Returns:
        True if the error can be retried
    """
    if isinstance(error, TenantConfError):
        return error.recoverable

    recoverable_types = (
        TimeoutError,
        ConnectionError,
    )
    return isinstance(error, recoverable_types)


def wrap_exception(
    error: Exception,
    message: str,
    error_class: type[TenantConfError] = TenantConfError,
    context: Optional[ErrorContext] = None,
) -> TenantConfError:
    """
    Wrap a standard exception in a tenantconf exception.

    Args:
        error: Original exception
        message: Human-readable message
        error_class: tenantconf exception class to use
        context: Additional context

    Returns:
        Wrapped tenantconf exception
    """
    return error_class(message, context=context, cause=error)


__all__ = [
    "TenantConfError",
    "ErrorContext",
    "ConfigurationError",
    "BackendSelectionError",
    "StorageError",
    "SourceUnavailableError",
    "ReloadError",
    "BackendError",
    "is_recoverable",
    "wrap_exception",
]
