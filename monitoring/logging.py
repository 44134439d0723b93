"""
Structured Logging - Monitoring Layer

stdlib logging set up for the file service: one-line JSON records in
production, a readable text line elsewhere, the current request ID on every
record, and keyword extras on every call.

@.architecture
Incoming: app.py, api/dependencies.py, All modules via get_logger() --- {str level, str format_type, Dict[str, str] module_levels, str request_id}
Processing: configure_logging(), configure_from_preset(), JSONFormatter.format(), StructuredLogger.process() --- {4 jobs: context_injection, formatting, log_configuration, structured_logging}
Outgoing: sys.stdout, Log files, All modules --- {StructuredLogger instances, JSON or text log lines}
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

# Context variable for request tracking
request_id_ctx: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

TEXT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-30s | [%(request_id)s] | %(message)s'
TEXT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def __init__(self, include_traceback: bool = True):
        super().__init__()
        self.include_traceback = include_traceback

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            'timestamp': created.isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        request_id = request_id_ctx.get()
        if request_id:
            payload['request_id'] = request_id

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            payload['extra'] = extra_fields

        if record.exc_info and self.include_traceback:
            exc_type, exc_value, _ = record.exc_info
            payload['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str)


class ContextFilter(logging.Filter):
    """Copies the request ID onto the record (``-`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or '-'
        return True


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger whose keyword arguments become structured fields.

        logger.info("Saved file", filename=name, size_bytes=n)

    The fields land on the record as ``extra_fields``; JSONFormatter emits
    them under ``extra``.
    """

    RESERVED_KWARGS = ('exc_info', 'stack_info', 'stacklevel', 'extra')

    def __init__(self, name: str):
        super().__init__(logging.getLogger(name), {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        fields = {key: kwargs.pop(key) for key in list(kwargs) if key not in self.RESERVED_KWARGS}
        if fields:
            kwargs['extra'] = {**kwargs.get('extra', {}), 'extra_fields': fields}
        return msg, kwargs


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "json":
        return JSONFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def _prepare(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[Path] = None,
    enable_console: bool = True,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Replace the root logger's handlers.

    Args:
        level: Root log level name
        format_type: "json" or "text"
        log_file: Also write to this file (parent directories are created)
        enable_console: Write to stdout
        module_levels: Level overrides for noisy loggers
    """
    formatter = _build_formatter(format_type)

    handlers = []
    if enable_console:
        handlers.append(_prepare(logging.StreamHandler(sys.stdout), formatter))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_prepare(logging.FileHandler(log_file), formatter))

    root = logging.getLogger()
    root.setLevel(_level(level))
    root.handlers = handlers

    for module_name, module_level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(_level(module_level))


def get_logger(name: str) -> StructuredLogger:
    """Structured logger for a module (pass ``__name__``)."""
    return StructuredLogger(name)


def set_request_context(request_id: Optional[str] = None) -> None:
    """Bind a request ID to the current task's log records."""
    if request_id:
        request_id_ctx.set(request_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


# Per-environment defaults; keyword overrides win
LOGGING_PRESETS: Dict[str, Dict[str, Any]] = {
    'development': dict(
        level='INFO',
        format_type='text',
        module_levels={'asyncio': 'WARNING', 'multipart': 'WARNING'},
    ),
    'production': dict(
        level='INFO',
        format_type='json',
        module_levels={'asyncio': 'WARNING', 'multipart': 'WARNING', 'uvicorn.access': 'WARNING'},
    ),
    'testing': dict(
        level='WARNING',
        format_type='text',
        module_levels={'asyncio': 'WARNING'},
    ),
}

# Settings.environment -> preset name
ENVIRONMENT_PRESETS = {
    'development': 'development',
    'production': 'production',
    'test': 'testing',
}


def configure_from_preset(preset: str = 'development', **overrides: Any) -> None:
    """
    Configure logging from a named preset.

    Raises:
        ValueError: If preset is unknown
    """
    if preset not in LOGGING_PRESETS:
        raise ValueError(f"Unknown preset: {preset}. Available: {list(LOGGING_PRESETS.keys())}")

    configure_logging(**{**LOGGING_PRESETS[preset], **overrides})
