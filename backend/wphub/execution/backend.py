"""Execution backend contract and its Appwrite functions adapter.

The backend performs the authenticated HTTP calls to remote WordPress sites
on our behalf. Two operations are needed:

1) ``submit`` starts an execution and returns whatever came back inline.
2) ``get_status`` re-reads the same execution by id.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from wphub.config import Settings
from wphub.errors import ExecutionBackendError
from wphub.execution.models import BackendReply, ExecutionStatus

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    "waiting": ExecutionStatus.pending,
    "processing": ExecutionStatus.pending,
    "pending": ExecutionStatus.pending,
    "completed": ExecutionStatus.completed,
    "failed": ExecutionStatus.failed,
}


class ExecutionBackend(ABC):
    """Abstract request/response execution service."""

    @abstractmethod
    async def submit(self, command: str, payload: str, *, synchronous: bool) -> BackendReply:
        """Start one execution of ``command``."""

    @abstractmethod
    async def get_status(self, command: str, execution_id: str) -> BackendReply:
        """Read the current state of a previously submitted execution."""

    async def close(self) -> None:
        """Release held resources."""


class AppwriteExecutionBackend(ExecutionBackend):
    """Execution backend speaking the Appwrite functions REST API.

    Keeps one ``httpx.AsyncClient`` for connection pooling across the
    submit/poll cycle instead of creating one per request.
    """

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        *,
        api_key: str | None = None,
        jwt: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id
        self._headers = {"X-Appwrite-Project": project_id, "Content-Type": "application/json"}
        if api_key:
            self._headers["X-Appwrite-Key"] = api_key
        if jwt:
            self._headers["X-Appwrite-JWT"] = jwt
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppwriteExecutionBackend":
        if not settings.execution_project_id:
            raise ValueError("execution_project_id is not configured")
        return cls(
            settings.execution_endpoint,
            settings.execution_project_id,
            api_key=settings.execution_api_key,
            timeout=settings.execution_http_timeout_seconds,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.endpoint,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def submit(self, command: str, payload: str, *, synchronous: bool) -> BackendReply:
        response = await self._request(
            "POST",
            f"/functions/{command}/executions",
            json={"body": payload, "async": not synchronous},
        )
        return self._to_reply(response)

    async def get_status(self, command: str, execution_id: str) -> BackendReply:
        response = await self._request("GET", f"/functions/{command}/executions/{execution_id}")
        return self._to_reply(response)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ExecutionBackendError(f"Execution backend unreachable: {exc}") from exc

        if response.is_error:
            raise ExecutionBackendError(_error_message(response), status_code=response.status_code)
        return response

    @staticmethod
    def _to_reply(response: httpx.Response) -> BackendReply:
        try:
            data = response.json()
        except ValueError as exc:
            raise ExecutionBackendError(
                "Execution backend returned a non-JSON envelope", status_code=response.status_code
            ) from exc

        raw_status = str(data.get("status") or "pending").lower()
        status = _STATUS_MAP.get(raw_status)
        if status is None:
            logger.warning("[Execution] Unknown execution status %r, treating as pending", raw_status)
            status = ExecutionStatus.pending

        return BackendReply(
            execution_id=str(data.get("$id") or ""),
            status=status,
            status_code=int(data.get("responseStatusCode") or 0),
            body=data.get("responseBody") or "",
        )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"Execution backend responded with status {response.status_code}"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"Execution backend responded with status {response.status_code}"
