"""
Shared fixtures.

No test talks to a real backend: FakeBackend replays scripted replies and
records every call, so tests can assert both outputs and call counts.
"""

import json
from collections import deque
from typing import Callable

import httpx
import pytest
import pytest_asyncio

from trustie.api.dependencies import get_backend, get_rankings_store
from trustie.main import app
from trustie.services.backend import BackendResult, ReasoningBackend
from trustie.services.rankings import InMemoryRankingsStore


# =============================================================================
# SCRIPTED BACKEND
# =============================================================================

class FakeBackend(ReasoningBackend):
    """
    ReasoningBackend that answers from a script.

    A reply can be a string (success) or a BackendResult (e.g. a failure).
    Replies come from `responder(prompt, web_search)` when given, otherwise
    from the queue; an empty queue answers with a failure.
    """

    def __init__(self, responder: Callable | None = None, *, configured: bool = True):
        self.responder = responder
        self.replies: deque = deque()
        self.calls: list[dict] = []
        self.configured = configured

    @property
    def is_configured(self) -> bool:
        return self.configured

    def queue(self, *replies) -> "FakeBackend":
        self.replies.extend(replies)
        return self

    async def submit(self, prompt, *, system=None, web_search=False, max_tokens=1000):
        self.calls.append({"prompt": prompt, "system": system, "web_search": web_search})
        if self.responder is not None:
            reply = self.responder(prompt, web_search)
        elif self.replies:
            reply = self.replies.popleft()
        else:
            reply = BackendResult.failure("no scripted reply")
        if isinstance(reply, BackendResult):
            return reply
        return BackendResult.success(reply)

    @property
    def search_calls(self) -> list[dict]:
        return [c for c in self.calls if c["web_search"]]


def sources_json(*domains: str) -> str:
    """A web-search reply listing one source per domain."""
    return json.dumps([
        {
            "url": f"https://www.{d}/article",
            "title": f"Article on {d}",
            "snippet": f"Snippet from {d}",
            "domain": d,
        }
        for d in domains
    ])


def claims_json(*claims: tuple[str, str]) -> str:
    """An extraction reply with (claim, type) pairs."""
    return json.dumps([{"claim": text, "type": kind, "searchQuery": text} for text, kind in claims])


def verdict_json(status: str, explanation: str = "The sources agree.", agreement: int | None = None) -> str:
    data = {"status": status, "explanation": explanation}
    if agreement is not None:
        data["agreementCount"] = agreement
    return json.dumps(data)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def store():
    return InMemoryRankingsStore(contradiction_penalty=2)


@pytest_asyncio.fixture
async def client(fake_backend, store):
    """HTTP client against the app, with the backend and store overridden."""
    app.dependency_overrides[get_backend] = lambda: fake_backend
    app.dependency_overrides[get_rankings_store] = lambda: store
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
