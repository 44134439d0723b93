"""
Monitoring & Observability Layer

Provides monitoring for the file service:
- Structured logging (JSON formatting, request ID injection)
- Metrics collection (Prometheus-compatible counters)
"""

# Logging
from .logging import (
    JSONFormatter,
    ContextFilter,
    StructuredLogger,
    configure_logging,
    configure_from_preset,
    get_logger,
    set_request_context,
    clear_request_context,
    get_request_id,
    LOGGING_PRESETS,
    ENVIRONMENT_PRESETS,
)

# Metrics
from .metrics import (
    Counter,
    MetricsRegistry,
    get_registry,
    counter,
)

__all__ = [
    # Logging
    'JSONFormatter',
    'ContextFilter',
    'StructuredLogger',
    'configure_logging',
    'configure_from_preset',
    'get_logger',
    'set_request_context',
    'clear_request_context',
    'get_request_id',
    'LOGGING_PRESETS',
    'ENVIRONMENT_PRESETS',

    # Metrics
    'Counter',
    'MetricsRegistry',
    'get_registry',
    'counter',
]
