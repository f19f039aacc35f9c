"""OpenTelemetry tracing with optional export to Azure Monitor.

``configure_observability`` must run before FastAPI is imported so the
auto-instrumentation sees the app. Export is opt-in:

* ``ENABLE_OBSERVABILITY`` truthy (true/1/yes/on) switches it on;
* ``APPLICATIONINSIGHTS_CONNECTION_STRING`` is required;
* ``OTEL_SERVICE_NAME`` defaults to ``voice-order-backend``.

When export is off, ``get_tracer`` hands out the OpenTelemetry API's no-op
tracer. Span attributes must never carry recognized text, names or phone
numbers; use lengths and flags instead.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from opentelemetry import trace


logger = logging.getLogger(__name__)

SERVICE_NAME = "voice-order-backend"
_TRUTHY = frozenset({"true", "1", "yes", "on"})
_UNTRACED_URLS = "health,health/,favicon.ico"


def _is_observability_enabled() -> bool:
    return os.getenv("ENABLE_OBSERVABILITY", "").strip().lower() in _TRUTHY


@lru_cache
def configure_observability() -> bool:
    """Install the Azure Monitor exporter; True when tracing is exported."""
    if not _is_observability_enabled():
        logger.info("Trace export disabled (ENABLE_OBSERVABILITY is not set)")
        return False

    connection_string = os.getenv("APPLICATIONINSIGHTS_CONNECTION_STRING")
    if not connection_string:
        logger.warning(
            "ENABLE_OBSERVABILITY is set but APPLICATIONINSIGHTS_CONNECTION_STRING "
            "is missing; trace export disabled"
        )
        return False

    try:
        from azure.monitor.opentelemetry import configure_azure_monitor
    except ImportError:
        logger.warning(
            "azure-monitor-opentelemetry is not installed; install the "
            "'observability' extra to export traces"
        )
        return False

    service_name = os.environ.setdefault("OTEL_SERVICE_NAME", SERVICE_NAME)
    os.environ.setdefault("OTEL_PYTHON_FASTAPI_EXCLUDED_URLS", _UNTRACED_URLS)
    try:
        configure_azure_monitor(connection_string=connection_string)
    except Exception:
        logger.exception("Azure Monitor exporter setup failed")
        return False

    logger.info("Exporting traces to Azure Monitor as %r", service_name)
    return True


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)
