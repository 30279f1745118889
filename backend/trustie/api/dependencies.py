"""
Injectable collaborators for the API routes.

Routes never build their own backend or store. They receive them through
FastAPI dependencies, so tests can swap in a scripted backend and a fresh
store with app.dependency_overrides.

- get_backend:        one OpenAIBackend per process, built from settings
- get_rankings_store: the store held on app.state (created in main.py)
"""

from functools import lru_cache

from fastapi import Request

from trustie.config import get_settings
from trustie.services.backend import OpenAIBackend, ReasoningBackend
from trustie.services.rankings import RankingsStore


@lru_cache
def get_backend() -> ReasoningBackend:
    """Dependency that provides the shared reasoning backend."""
    return OpenAIBackend.from_settings(get_settings())


def get_rankings_store(request: Request) -> RankingsStore:
    """Dependency that provides the process-wide rankings store."""
    return request.app.state.rankings_store
