"""
Base Storage Adapter

Provides common functionality for all configuration storage adapters.
"""

from abc import ABC
from typing import Any, TypeVar

from tenantconf.core.exceptions import BackendError, ErrorContext
from tenantconf.core.interfaces.storage import ConfigStorageProvider
from tenantconf.observability import CorrelationContext, get_logger, metrics

T = TypeVar("T")


class BaseStorageAdapter(ConfigStorageProvider, ABC):
    """
    Base class for storage adapters with common functionality.

    Provides:
    - Error conversion to BackendError
    - The degrade-or-raise policy for per-call backend failures
    """

    def __init__(self, raise_on_error: bool = False, **kwargs: Any):
        self._raise_on_error = raise_on_error
        self._extra_config = kwargs

    @property
    def raise_on_error(self) -> bool:
        return self._raise_on_error

    def _handle_error(self, error: Exception, operation: str) -> BackendError:
        """Convert provider-specific errors to standard errors."""
        return BackendError(
            message=f"{operation} failed: {error}",
            provider=self.provider_name,
            operation=operation,
            context=ErrorContext(
                backend=self.provider_name,
                operation=operation,
                correlation_id=CorrelationContext.get(),
            ),
            cause=error,
        )

    def _degrade(self, error: Exception, operation: str, fallback: T) -> T:
        """
        Apply the backend failure policy.

        The failure is always logged as a backend error (never as "not found").
        With raise_on_error the wrapped BackendError is raised, otherwise the
        empty fallback is returned.
        """
        wrapped = self._handle_error(error, operation)
        metrics.increment_counter(f"storage.{self.provider_name}.errors")
        log = get_logger(__name__, backend=self.provider_name, operation=operation)
        log.error("Backend failure", event="storage.backend.error", error=str(error))

        if self._raise_on_error:
            raise wrapped from error
        return fallback
