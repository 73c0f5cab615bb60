"""
OpenTelemetry instrumentation for the scheduled update jobs
"""

import functools
import os
import time
from collections.abc import Callable
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace as otel_trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.requests import RequestsInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

from .logging_config import SERVICE_NAME


class TelemetryManager:
    """Manages OpenTelemetry setup and instrumentation"""

    def __init__(self, service_name: str = SERVICE_NAME):
        """
        Initialize telemetry manager.

        Args:
            service_name: Name of the service for telemetry identification
        """
        self.service_name = service_name
        self.tracer = None
        self._setup_telemetry()

    def _setup_telemetry(self) -> None:
        """Set up OpenTelemetry tracing"""
        resource = Resource.create({"service.name": self.service_name})
        tracer_provider = TracerProvider(resource=resource)

        # Spans are only exported when a collector endpoint is configured
        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        if otlp_endpoint:
            tracer_provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint))
            )
            otel_trace.set_tracer_provider(tracer_provider)
            RequestsInstrumentor().instrument()

        self.tracer = tracer_provider.get_tracer(__name__)

    @contextmanager
    def trace_operation(
        self, operation_name: str, attributes: dict[str, Any] | None = None
    ):
        """
        Context manager for tracing operations.

        Args:
            operation_name: Name of the operation being traced
            attributes: Additional attributes to add to the span

        Yields:
            The current span
        """
        with self.tracer.start_as_current_span(operation_name) as span:
            if attributes:
                for key, value in attributes.items():
                    span.set_attribute(key, str(value))

            try:
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    def trace_function(self, operation_name: str | None = None):
        """
        Decorator for tracing function calls.

        Args:
            operation_name: Custom operation name (defaults to function name)

        Returns:
            Decorated function
        """

        def decorator(func: Callable) -> Callable:
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                name = operation_name or f"{func.__module__}.{func.__name__}"

                with self.trace_operation(name) as span:
                    start_time = time.time()
                    try:
                        return func(*args, **kwargs)
                    except SystemExit as e:
                        # Entry points report their outcome through sys.exit
                        span.set_attribute("exit_code", e.code if e.code is not None else 0)
                        if e.code:
                            span.set_status(Status(StatusCode.ERROR, f"exit code {e.code}"))
                        raise
                    finally:
                        span.set_attribute("duration_seconds", time.time() - start_time)

            return wrapper

        return decorator


_telemetry_manager: TelemetryManager | None = None


def get_telemetry_manager() -> TelemetryManager:
    """Get or create the global telemetry manager instance"""
    global _telemetry_manager
    if _telemetry_manager is None:
        _telemetry_manager = TelemetryManager()
    return _telemetry_manager


def trace_operation(operation_name: str, attributes: dict[str, Any] | None = None):
    """Convenience function for tracing operations."""
    return get_telemetry_manager().trace_operation(operation_name, attributes)


def trace_function(operation_name: str | None = None):
    """Convenience decorator for tracing functions."""
    return get_telemetry_manager().trace_function(operation_name)
