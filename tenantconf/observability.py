"""
Observability Module

Provides request correlation, structured logging, and timing metrics.

Key features:
- Correlation IDs for tracing a request through the storage layer
- Structured logging with key=value context
- Timing metrics for storage operations
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


# ============================================================================
# Correlation ID Management
# ============================================================================

class CorrelationContext:
    """
    Context-local storage for correlation IDs.

    Each asyncio task sees its own value, so concurrent requests do not
    share IDs.
    """

    @classmethod
    def get(cls) -> Optional[str]:
        """Get current correlation ID."""
        return _correlation_id.get()

    @classmethod
    def set(cls, correlation_id: Optional[str]) -> None:
        """Set correlation ID for current context."""
        _correlation_id.set(correlation_id)

    @classmethod
    def generate(cls) -> str:
        """Generate a new correlation ID."""
        return f"req-{uuid.uuid4().hex[:12]}"

    @classmethod
    def clear(cls) -> None:
        _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None):
    """
    Context manager for correlation ID scope.

    Usage:
        with correlation_scope() as cid:
            # All logs in this scope carry cid
            await storage.get_config(request)
    """
    cid = correlation_id or CorrelationContext.generate()
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


# ============================================================================
# Structured Logging
# ============================================================================

@dataclass
class LogContext:
    """Context attached to log entries."""
    correlation_id: Optional[str] = None
    backend: Optional[str] = None
    operation: Optional[str] = None
    tenant: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "correlation_id": self.correlation_id or CorrelationContext.get(),
            "backend": self.backend,
            "operation": self.operation,
            "tenant": self.tenant,
        }
        d.update(self.extra)
        return {k: v for k, v in d.items() if v is not None}


class StructuredLogger:
    """
    Logger with structured context and correlation IDs.

    Usage:
        log = StructuredLogger("tenantconf.routes")
        log.info("Config found", event="business.config.found", tenant="tenant1")
    """

    _CONTEXT_FIELDS = ("correlation_id", "backend", "operation", "tenant")

    def __init__(self, name: str, context: Optional[LogContext] = None):
        self._logger = logging.getLogger(name)
        self._context = context or LogContext()

    @property
    def name(self) -> str:
        return self._logger.name

    def with_context(self, **kwargs) -> "StructuredLogger":
        """Create logger with additional context."""
        new_context = LogContext(
            correlation_id=kwargs.get("correlation_id", self._context.correlation_id),
            backend=kwargs.get("backend", self._context.backend),
            operation=kwargs.get("operation", self._context.operation),
            tenant=kwargs.get("tenant", self._context.tenant),
            extra={
                **self._context.extra,
                **{k: v for k, v in kwargs.items() if k not in self._CONTEXT_FIELDS},
            },
        )
        return StructuredLogger(self._logger.name, new_context)

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with context."""
        ctx = self._context.to_dict()
        prefix = f"[{ctx.pop('correlation_id')}] " if ctx.get("correlation_id") else ""

        fields = {**ctx, **{k: v for k, v in kwargs.items() if v is not None}}
        if not fields:
            return f"{prefix}{message}"
        extra_str = " | ".join(f"{k}={v}" for k, v in fields.items())
        return f"{prefix}{message} | {extra_str}"

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs) -> None:
        self._logger.exception(self._format_message(message, **kwargs))


def get_logger(name: str, **context) -> StructuredLogger:
    """Get a structured logger with optional context."""
    return StructuredLogger(name, LogContext(**context))


# ============================================================================
# Timing and Metrics
# ============================================================================

@dataclass
class TimingMetric:
    """A single timing measurement."""
    operation: str
    duration_ms: float
    backend: Optional[str] = None
    correlation_id: Optional[str] = None
    success: bool = True
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MetricsCollector:
    """
    Collects timing and counter metrics in process.

    Keeps only the most recent timings.
    """

    _instance: Optional["MetricsCollector"] = None

    def __init__(self, max_timings: int = 10000):
        self._timings: List[TimingMetric] = []
        self._counters: Dict[str, int] = {}
        self._max_timings = max_timings

    @classmethod
    def get_instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = MetricsCollector()
        return cls._instance

    async def record_timing(
        self,
        operation: str,
        duration_ms: float,
        backend: Optional[str] = None,
        success: bool = True,
    ) -> None:
        metric = TimingMetric(
            operation=operation,
            duration_ms=duration_ms,
            backend=backend,
            correlation_id=CorrelationContext.get(),
            success=success,
        )

        self._timings.append(metric)
        if len(self._timings) > self._max_timings:
            self._timings = self._timings[-self._max_timings:]

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_timing_stats(
        self,
        operation: Optional[str] = None,
        last_n: int = 100,
    ) -> Dict[str, Any]:
        """Get timing statistics, optionally for one operation."""
        filtered = self._timings[-last_n:]
        if operation:
            filtered = [t for t in filtered if t.operation == operation]

        if not filtered:
            return {"count": 0, "avg_ms": 0, "min_ms": 0, "max_ms": 0, "success_rate": 0}

        durations = [t.duration_ms for t in filtered]
        return {
            "count": len(durations),
            "avg_ms": sum(durations) / len(durations),
            "min_ms": min(durations),
            "max_ms": max(durations),
            "success_rate": sum(1 for t in filtered if t.success) / len(filtered),
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._timings.clear()
        self._counters.clear()


# Global metrics collector
metrics = MetricsCollector.get_instance()


# ============================================================================
# Decorators and Context Managers
# ============================================================================

@asynccontextmanager
async def timed_operation(
    operation: str,
    backend: Optional[str] = None,
    log: bool = True,
):
    """
    Context manager for timing async operations.

    Usage:
        async with timed_operation("get_config", backend="dynamodb"):
            item = await table.get_item(...)
    """
    start_time = time.perf_counter()
    success = True

    try:
        yield
    except Exception:
        success = False
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        await metrics.record_timing(
            operation=operation,
            duration_ms=duration_ms,
            backend=backend,
            success=success,
        )

        if log:
            log_msg = f"Operation {operation} completed in {duration_ms:.2f}ms"
            if backend:
                log_msg = f"[{backend}] {log_msg}"
            if success:
                logger.debug(log_msg)
            else:
                logger.warning(f"{log_msg} (failed)")


def traced(operation: Optional[str] = None):
    """
    Decorator for timing async storage methods.

    The backend name is taken from the instance's `provider_name`.

    Usage:
        @traced("get_config")
        async def get_config(self, request): ...
    """
    def decorator(func: Callable) -> Callable:
        op_name = operation or func.__name__

        @wraps(func)
        async def wrapper(self, *args, **kwargs) -> Any:
            backend = getattr(self, "provider_name", None)
            async with timed_operation(op_name, backend=backend):
                return await func(self, *args, **kwargs)

        return wrapper
    return decorator


def setup_logging(
    level: int | str = logging.INFO,
    format_string: Optional[str] = None,
) -> None:
    """
    Setup logging configuration for tenantconf.

    Call this at application startup.
    """
    fmt = format_string or "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("aiobotocore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
