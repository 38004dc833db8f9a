"""Logging configuration with request context."""

from __future__ import annotations

import logging
from logging.handlers import SysLogHandler

from opentelemetry import trace

from wphub.config import Settings, get_settings
from wphub.observability.context import get_request_id

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s "
    "trace_id=%(trace_id)s span_id=%(span_id)s %(message)s"
)


class RequestIdFilter(logging.Filter):
    """Attach request_id and trace ids to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        span = trace.get_current_span()
        span_context = span.get_span_context()
        if span_context and span_context.is_valid:
            record.trace_id = format(span_context.trace_id, "032x")
            record.span_id = format(span_context.span_id, "016x")
        else:
            record.trace_id = "-"
            record.span_id = "-"
        record.request_id = get_request_id() or "-"
        return True


def configure_logging(settings: Settings | None = None) -> None:
    """Configure base logging to include request context."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    root_logger = logging.getLogger()
    # Filters on the logger do not run for records propagated from children,
    # so the filter goes on every handler.
    request_filter = RequestIdFilter()
    for handler in root_logger.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(request_filter)

    if settings.syslog_host:
        syslog_handler = SysLogHandler(address=(settings.syslog_host, settings.syslog_port))
        syslog_handler.setLevel(logging.INFO)
        syslog_handler.setFormatter(logging.Formatter("%(name)s %(levelname)s %(message)s"))
        syslog_handler.addFilter(request_filter)
        root_logger.addHandler(syslog_handler)
