"""Dataclasses for execution requests, backend replies and outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


class ExecutionStatus(str, Enum):
    """Backend-reported lifecycle of one execution."""

    pending = "pending"
    completed = "completed"
    failed = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ExecutionStatus.pending


@dataclass(slots=True, frozen=True)
class ExecutionRequest:
    """A single command dispatched to the execution backend."""

    command: str
    payload: str
    site_id: str | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True, frozen=True)
class BackendReply:
    """What the backend returned for a submission or a status check."""

    execution_id: str
    status: ExecutionStatus
    status_code: int
    body: str = ""

    @property
    def has_body(self) -> bool:
        return bool(self.body and self.body.strip())


@dataclass(slots=True, frozen=True)
class Succeeded:
    body: Any
    status_code: int = 200


@dataclass(slots=True, frozen=True)
class Failed:
    status_code: int
    message: str
    malformed: bool = False
    raw_body: str | None = None


@dataclass(slots=True, frozen=True)
class TimedOut:
    attempts: int


ExecutionOutcome = Union[Succeeded, Failed, TimedOut]
