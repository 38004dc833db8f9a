"""Execution client: one submission, bounded status polling, one outcome."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from opentelemetry import trace

from wphub.errors import ExecutionBackendError
from wphub.execution.backend import ExecutionBackend
from wphub.execution.models import (
    BackendReply,
    ExecutionOutcome,
    ExecutionRequest,
    Failed,
    Succeeded,
    TimedOut,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Polling bounds are fixed design parameters, not settings.
INTERACTIVE_POLL_ATTEMPTS: int = 5
FETCH_POLL_ATTEMPTS: int = 10
POLL_INTERVAL_SECONDS: float = 1.0

EMPTY_RESPONSE_MESSAGE = "empty response"


def resolve_body(status_code: int, body: str) -> Succeeded | Failed:
    """Turn a non-empty response body into a terminal outcome.

    Never raises: a body that is not JSON becomes a ``Failed`` outcome
    carrying the raw text.
    """
    try:
        parsed = json.loads(body)
    except ValueError:
        if status_code < 400:
            return Failed(status_code=status_code, message=body, malformed=True, raw_body=body)
        return Failed(status_code=status_code, message=body, raw_body=body)

    if status_code < 400:
        return Succeeded(body=parsed, status_code=status_code)

    message = None
    if isinstance(parsed, dict):
        message = parsed.get("message")
    if not isinstance(message, str) or not message:
        message = f"Request failed with status {status_code}"
    return Failed(status_code=status_code, message=message, raw_body=body)


class ExecutionClient:
    """Invoke named commands on the execution backend.

    Hides the difference between backends that answer inline and ones that
    need polling. Polling only re-reads the same execution; a command is
    submitted exactly once.
    """

    def __init__(
        self,
        backend: ExecutionBackend,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        if poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        self.backend = backend
        self.poll_interval = poll_interval

    async def execute(
        self,
        command: str,
        payload: Any,
        *,
        synchronous: bool = True,
        max_attempts: int = FETCH_POLL_ATTEMPTS,
        site_id: str | None = None,
    ) -> ExecutionOutcome:
        """Submit ``command`` once and return its terminal outcome."""
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        request = ExecutionRequest(command=command, payload=json.dumps(payload), site_id=site_id)
        with tracer.start_as_current_span("execution.execute") as span:
            span.set_attribute("execution.command", command)
            if site_id:
                span.set_attribute("execution.site_id", site_id)
            outcome = await self._run(request, synchronous=synchronous, max_attempts=max_attempts)
            span.set_attribute("execution.outcome", type(outcome).__name__)
        return outcome

    async def _run(
        self,
        request: ExecutionRequest,
        *,
        synchronous: bool,
        max_attempts: int,
    ) -> ExecutionOutcome:
        try:
            reply = await self.backend.submit(request.command, request.payload, synchronous=synchronous)
        except ExecutionBackendError as exc:
            logger.warning("[Execution] Submission of %s failed: %s", request.command, exc)
            return Failed(status_code=exc.status_code or 502, message=str(exc))

        if reply.has_body:
            return self._finish(request, resolve_body(reply.status_code, reply.body))

        if not reply.execution_id:
            return self._finish(request, Failed(status_code=reply.status_code, message=EMPTY_RESPONSE_MESSAGE))

        return await self._poll(request, reply.execution_id, max_attempts)

    async def _poll(self, request: ExecutionRequest, execution_id: str, max_attempts: int) -> ExecutionOutcome:
        for attempt in range(1, max_attempts + 1):
            try:
                reply: BackendReply = await self.backend.get_status(request.command, execution_id)
            except ExecutionBackendError as exc:
                logger.warning(
                    "[Execution] Status check %d/%d for %s failed: %s",
                    attempt,
                    max_attempts,
                    execution_id,
                    exc,
                )
            else:
                if reply.has_body:
                    return self._finish(request, resolve_body(reply.status_code, reply.body))
                if reply.status.is_terminal:
                    return self._finish(
                        request, Failed(status_code=reply.status_code, message=EMPTY_RESPONSE_MESSAGE)
                    )

            if attempt < max_attempts:
                await asyncio.sleep(self.poll_interval)

        logger.warning(
            "[Execution] %s (%s) gave no terminal response after %d status checks",
            request.command,
            execution_id,
            max_attempts,
        )
        return TimedOut(attempts=max_attempts)

    @staticmethod
    def _finish(request: ExecutionRequest, outcome: ExecutionOutcome) -> ExecutionOutcome:
        if isinstance(outcome, Failed):
            if outcome.malformed:
                logger.warning("[Execution] %s returned a non-JSON body", request.command)
            else:
                logger.warning(
                    "[Execution] %s failed with status %s: %s",
                    request.command,
                    outcome.status_code,
                    outcome.message,
                )
        return outcome
