"""
Exception Hierarchy Tests

Run: pytest tenantconf/tests/core/test_exceptions.py -v
"""

from tenantconf.core.exceptions import (
    BackendError,
    BackendSelectionError,
    ConfigurationError,
    ErrorContext,
    ReloadError,
    SourceUnavailableError,
    StorageError,
    TenantConfError,
    is_recoverable,
    wrap_exception,
)


class TestHierarchy:
    """Tests for exception inheritance and recoverability."""

    def test_storage_errors_share_base(self):
        for cls in (SourceUnavailableError, ReloadError, BackendError):
            assert issubclass(cls, StorageError)
            assert issubclass(cls, TenantConfError)

    def test_backend_selection_is_configuration_error(self):
        error = BackendSelectionError("redis", available=["file", "dynamodb"])
        assert isinstance(error, ConfigurationError)
        assert error.provider == "redis"
        assert "Available: dynamodb, file" in str(error)

    def test_recoverability(self):
        """Startup failures are fatal, per-call and reload failures are not."""
        assert not is_recoverable(SourceUnavailableError("missing"))
        assert is_recoverable(ReloadError("bad json"))
        assert is_recoverable(BackendError("throttled"))
        assert is_recoverable(TimeoutError())
        assert not is_recoverable(KeyError("x"))


class TestContext:
    """Tests for error context propagation."""

    def test_provider_fills_backend(self):
        error = BackendError("scan failed", provider="dynamodb", operation="get_services")
        assert error.context.backend == "dynamodb"
        assert error.context.operation == "get_services"
        assert str(error) == "scan failed [backend=dynamodb] [op=get_services]"

    def test_to_dict(self):
        cause = OSError("disk")
        error = SourceUnavailableError(
            "cannot load",
            source="data/configurations.json",
            provider="file",
            context=ErrorContext(correlation_id="req-1"),
            cause=cause,
        )
        payload = error.to_dict()
        assert payload["error_type"] == "SourceUnavailableError"
        assert payload["recoverable"] is False
        assert payload["cause"] == "disk"
        assert payload["context"]["correlation_id"] == "req-1"
        assert payload["context"]["backend"] == "file"

    def test_wrap_exception(self):
        original = ValueError("boom")
        wrapped = wrap_exception(original, "wrapped", ConfigurationError)
        assert isinstance(wrapped, ConfigurationError)
        assert wrapped.cause is original
