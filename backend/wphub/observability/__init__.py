"""Logging and request-context helpers."""

from wphub.observability.context import RequestContextMiddleware, get_request_id
from wphub.observability.logging import RequestIdFilter, configure_logging

__all__ = [
    "RequestContextMiddleware",
    "RequestIdFilter",
    "configure_logging",
    "get_request_id",
]
