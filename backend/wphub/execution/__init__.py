"""Execution backend access: submission, polling and outcome parsing."""

from wphub.execution.backend import AppwriteExecutionBackend, ExecutionBackend
from wphub.execution.client import (
    FETCH_POLL_ATTEMPTS,
    INTERACTIVE_POLL_ATTEMPTS,
    POLL_INTERVAL_SECONDS,
    ExecutionClient,
    resolve_body,
)
from wphub.execution.models import (
    BackendReply,
    ExecutionOutcome,
    ExecutionRequest,
    ExecutionStatus,
    Failed,
    Succeeded,
    TimedOut,
)

__all__ = [
    "AppwriteExecutionBackend",
    "BackendReply",
    "ExecutionBackend",
    "ExecutionClient",
    "ExecutionOutcome",
    "ExecutionRequest",
    "ExecutionStatus",
    "FETCH_POLL_ATTEMPTS",
    "Failed",
    "INTERACTIVE_POLL_ATTEMPTS",
    "POLL_INTERVAL_SECONDS",
    "Succeeded",
    "TimedOut",
    "resolve_body",
]
