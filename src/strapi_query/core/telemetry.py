# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Telemetry infrastructure for the Strapi query SDK.

Provides OpenTelemetry-based tracing, metrics, and logging with
an extensible hook system for custom telemetry providers.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from opentelemetry import metrics, trace
from opentelemetry.trace import Status, StatusCode

from ..common.constants import (
    OTEL_ATTR_DB_OPERATION,
    OTEL_ATTR_DB_SYSTEM,
    OTEL_ATTR_HTTP_METHOD,
    OTEL_ATTR_HTTP_STATUS_CODE,
    OTEL_ATTR_HTTP_URL,
    OTEL_ATTR_STRAPI_COLLECTION,
    OTEL_ATTR_STRAPI_CORRELATION_ID,
    OTEL_ATTR_STRAPI_REQUEST_ID,
)

_INSTRUMENTATION_NAME = "strapi_query"
_SCHEMA_URL = "https://opentelemetry.io/schemas/1.21.0"

_hook_logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class TelemetryConfig:
    """Configuration for SDK telemetry and observability.

    Telemetry is opt-in. When enabled, the SDK produces OpenTelemetry-compatible
    traces and metrics plus standard library log records.

    Example:
        Request logging only::

            config = StrapiConfig(
                telemetry=TelemetryConfig(enable_logging=True, log_level="DEBUG")
            )

        Full observability::

            config = StrapiConfig(
                telemetry=TelemetryConfig(
                    enable_tracing=True,
                    enable_metrics=True,
                    enable_logging=True,
                )
            )
    """

    # Signal toggles
    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    # Logging configuration
    log_level: str = "WARNING"
    logger_name: str = "strapi_query"

    # Custom hooks
    hooks: List["TelemetryHook"] = field(default_factory=list)


# ============================================================================
# Context Objects
# ============================================================================


@dataclass
class RequestContext:
    """Context passed to telemetry hooks for each HTTP request."""

    client_request_id: str
    correlation_id: str

    method: str
    url: str
    operation: str  # e.g. "query.execute", "content_types.list"
    collection: Optional[str] = None

    start_time: float = field(default_factory=time.perf_counter)

    # Custom data bag for hooks to share state
    custom_data: Dict[str, Any] = field(default_factory=dict)

    _span: Any = field(default=None, repr=False)


@dataclass
class ResponseContext:
    """Response information passed to telemetry hooks."""

    status_code: int
    duration_ms: float
    error: Optional[Exception] = None


# ============================================================================
# Hook Protocol
# ============================================================================


@runtime_checkable
class TelemetryHook(Protocol):
    """Protocol for custom telemetry hooks.

    All methods are optional - implement only what you need.

    Example:
        class TimingHook:
            def __init__(self, statsd):
                self.statsd = statsd

            def on_request_end(self, request: RequestContext, response: ResponseContext):
                self.statsd.timing(f"strapi.{request.operation}.duration", response.duration_ms)
    """

    def on_request_start(self, context: RequestContext) -> None:
        """Called before each HTTP request is sent."""
        ...

    def on_request_end(self, request: RequestContext, response: ResponseContext) -> None:
        """Called after each HTTP request completes."""
        ...

    def on_request_error(self, request: RequestContext, error: Exception) -> None:
        """Called when an unhandled exception occurs."""
        ...


# ============================================================================
# Telemetry Manager
# ============================================================================


class TelemetryManager:
    """Manages telemetry instrumentation for the SDK.

    This class is internal and not part of the public API.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        self._config = config or TelemetryConfig()
        self._tracer: Optional[trace.Tracer] = None
        self._meter: Optional[metrics.Meter] = None
        self._logger: Optional[logging.Logger] = None
        self._hooks = list(self._config.hooks)

        self._request_duration: Optional[Any] = None
        self._request_count: Optional[Any] = None
        self._error_count: Optional[Any] = None

        self._initialize()

    @property
    def is_tracing_enabled(self) -> bool:
        return self._config.enable_tracing

    @property
    def is_metrics_enabled(self) -> bool:
        return self._config.enable_metrics

    def _initialize(self) -> None:
        if self._config.enable_tracing:
            self._tracer = trace.get_tracer(_INSTRUMENTATION_NAME, schema_url=_SCHEMA_URL)

        if self._config.enable_metrics:
            self._meter = metrics.get_meter(_INSTRUMENTATION_NAME, schema_url=_SCHEMA_URL)
            self._request_duration = self._meter.create_histogram(
                name="strapi.client.request.duration",
                description="Duration of Strapi API requests",
                unit="ms",
            )
            self._request_count = self._meter.create_counter(
                name="strapi.client.request.count",
                description="Number of Strapi API requests",
                unit="1",
            )
            self._error_count = self._meter.create_counter(
                name="strapi.client.error.count",
                description="Number of Strapi API errors",
                unit="1",
            )

        if self._config.enable_logging:
            self._logger = logging.getLogger(self._config.logger_name)
            self._logger.setLevel(getattr(logging, self._config.log_level.upper()))

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        client_request_id: str,
        correlation_id: str,
        collection: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        """Create a traced request context.

        Usage:
            with telemetry.trace_request("query.execute", "GET", url, req_id, corr_id) as ctx:
                response = self._http._request(...)
                telemetry.record_response(ctx, response.status_code)
        """
        ctx = RequestContext(
            client_request_id=client_request_id,
            correlation_id=correlation_id,
            method=method,
            url=url,
            operation=operation,
            collection=collection,
        )

        self._dispatch("on_request_start", ctx)

        span = None
        if self._tracer:
            span_name = f"Strapi {operation}"
            if collection:
                span_name = f"{span_name} {collection}"
            attributes = {
                OTEL_ATTR_DB_SYSTEM: "strapi",
                OTEL_ATTR_DB_OPERATION: operation,
                OTEL_ATTR_HTTP_METHOD: method,
                OTEL_ATTR_HTTP_URL: url,
                OTEL_ATTR_STRAPI_REQUEST_ID: client_request_id,
                OTEL_ATTR_STRAPI_CORRELATION_ID: correlation_id,
            }
            if collection:
                attributes[OTEL_ATTR_STRAPI_COLLECTION] = collection
            span = self._tracer.start_span(span_name, kind=trace.SpanKind.CLIENT, attributes=attributes)
            ctx._span = span

        try:
            yield ctx
        except Exception as e:
            if span:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
            if self._logger:
                self._logger.warning("%s %s failed: %s", ctx.operation, ctx.method, e)
            self._dispatch("on_request_error", ctx, e)
            raise
        finally:
            if span:
                span.end()

    def record_response(
        self,
        ctx: RequestContext,
        status_code: int,
        error: Optional[Exception] = None,
    ) -> None:
        """Record response metrics, log the request and dispatch to hooks."""
        duration_ms = (time.perf_counter() - ctx.start_time) * 1000
        response = ResponseContext(status_code=status_code, duration_ms=duration_ms, error=error)

        if ctx._span:
            ctx._span.set_attribute(OTEL_ATTR_HTTP_STATUS_CODE, status_code)

        if self._request_duration:
            attributes: Dict[str, Any] = {
                "operation": ctx.operation,
                "method": ctx.method,
                "status_code": status_code,
            }
            if ctx.collection:
                attributes["collection"] = ctx.collection
            self._request_duration.record(duration_ms, attributes)
            self._request_count.add(1, attributes)
            if status_code >= 400:
                self._error_count.add(1, attributes)

        if self._logger:
            level = logging.WARNING if status_code >= 400 else logging.DEBUG
            self._logger.log(
                level,
                f"{ctx.operation} {ctx.method} {status_code} {duration_ms:.1f}ms",
                extra={"client_request_id": ctx.client_request_id, "correlation_id": ctx.correlation_id},
            )

        self._dispatch("on_request_end", ctx, response)

    def _dispatch(self, event: str, *args: Any) -> None:
        """Dispatch an event to all registered hooks; hooks never break requests."""
        for hook in self._hooks:
            handler = getattr(hook, event, None)
            if handler is None:
                continue
            try:
                handler(*args)
            except Exception:
                _hook_logger.warning("Telemetry hook %r failed on %s", hook, event, exc_info=True)


# ============================================================================
# No-op Manager for when telemetry is disabled
# ============================================================================


class NoOpTelemetryManager:
    """No-op telemetry manager when telemetry is disabled."""

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        client_request_id: str,
        correlation_id: str,
        collection: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        yield RequestContext(
            client_request_id=client_request_id,
            correlation_id=correlation_id,
            method=method,
            url=url,
            operation=operation,
            collection=collection,
        )

    def record_response(self, *args: Any, **kwargs: Any) -> None:
        pass


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    """Factory to create appropriate telemetry manager."""
    if config is None:
        return NoOpTelemetryManager()

    has_any_enabled = config.enable_tracing or config.enable_metrics or config.enable_logging or config.hooks
    if not has_any_enabled:
        return NoOpTelemetryManager()

    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "RequestContext",
    "ResponseContext",
    "create_telemetry_manager",
]
