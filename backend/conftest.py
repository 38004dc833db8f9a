# conftest.py - Global pytest configuration
"""
Shared fixtures for the bridge tests.

Nothing here touches the network: the execution backend is scripted, the
document store lives in memory, and identities come from a static session
provider.
"""
from __future__ import annotations

import asyncio
import json

import pytest

from wphub.auth.models import Identity
from wphub.auth.session import StaticSessionProvider
from wphub.bridge import build_bridge
from wphub.config import Settings
from wphub.execution.backend import ExecutionBackend
from wphub.execution.models import BackendReply, ExecutionStatus
from wphub.storage.documents import InMemoryDocumentStore

ALICE_TOKEN = "alice-token"
BOB_TOKEN = "bob-token"


def json_reply(body, status_code: int = 200, execution_id: str = "exec-1") -> BackendReply:
    """A completed reply carrying ``body`` serialized as JSON."""
    return BackendReply(
        execution_id=execution_id,
        status=ExecutionStatus.completed,
        status_code=status_code,
        body=json.dumps(body),
    )


def pending_reply(execution_id: str = "exec-1") -> BackendReply:
    return BackendReply(execution_id=execution_id, status=ExecutionStatus.pending, status_code=0, body="")


class ScriptedExecutionBackend(ExecutionBackend):
    """Execution backend that replays queued replies.

    Queued items may be exceptions, which are raised instead of returned.
    When ``gate`` is set, submissions wait on it before answering.
    """

    def __init__(self, submit_replies=None, status_replies=None):
        self.submit_replies = list(submit_replies or [])
        self.status_replies = list(status_replies or [])
        self.submitted: list[tuple[str, dict, bool]] = []
        self.polled: list[str] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    def queue(self, *replies) -> None:
        self.submit_replies.extend(replies)

    async def submit(self, command, payload, *, synchronous):
        self.submitted.append((command, json.loads(payload), synchronous))
        if self.gate is not None:
            await self.gate.wait()
        item = self.submit_replies.pop(0) if self.submit_replies else pending_reply()
        if isinstance(item, Exception):
            raise item
        return item

    async def get_status(self, command, execution_id):
        self.polled.append(execution_id)
        item = self.status_replies.pop(0) if self.status_replies else pending_reply(execution_id)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


@pytest.fixture
def alice() -> Identity:
    return Identity(user_id="user-alice", email="alice@example.com", name="Alice")


@pytest.fixture
def bob() -> Identity:
    return Identity(user_id="user-bob", email="bob@example.com", name="Bob")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="development",
        encryption_key="test-encryption-key",
        app_origin="https://dash.example.test",
        auth_secret_key="test-auth-secret",
        execution_project_id="project-test",
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def backend() -> ScriptedExecutionBackend:
    return ScriptedExecutionBackend()


@pytest.fixture
def sessions(alice, bob) -> StaticSessionProvider:
    return StaticSessionProvider({ALICE_TOKEN: alice, BOB_TOKEN: bob})


@pytest.fixture
def bridge(settings, store, backend, sessions):
    return build_bridge(settings, store=store, backend=backend, sessions=sessions, poll_interval=0)


@pytest.fixture
def seed_site(bridge):
    """Async helper creating a site, connected unless told otherwise."""

    async def _seed(identity, name="Blog", base_url="https://example.com", connected=True):
        site = await bridge.sites.create_site(identity, name, base_url)
        if connected:
            site = await bridge.sites.store_credentials(
                identity,
                site.id,
                username="admin",
                sealed_secret="sealed-secret",
            )
        return site

    return _seed
