"""
Reasoning Backend.

WHAT THIS DOES:
Wraps the single external capability the whole service depends on:
"submit a prompt, optionally with web search enabled, get free-form text back".

WHY AN INTERFACE:
The backend is non-deterministic and unreliable. Every caller must handle
failure, so submit() never raises for upstream problems. It returns a
BackendResult that is either success(text) or failure(reason).
Tests swap in a scripted fake implementing the same interface.

HOW IT WORKS (OpenAIBackend):
- Plain reasoning → Chat Completions
- Evidence search → Responses API with the web_search_preview tool
- Every call is wrapped in asyncio.wait_for(timeout)

USAGE:
    backend = OpenAIBackend.from_settings(get_settings())
    result = await backend.submit("Is the sky blue?", web_search=True)
    if result.ok:
        print(result.text)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from trustie.config import Settings
from trustie.errors import BackendError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendResult:
    """Outcome of one backend call."""

    ok: bool
    text: str = ""
    reason: str = ""

    @classmethod
    def success(cls, text: str) -> "BackendResult":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, reason: str) -> "BackendResult":
        return cls(ok=False, reason=reason)

    def unwrap(self) -> str:
        """Return the reply text, or raise BackendError for a failed call."""
        if not self.ok:
            raise BackendError(self.reason)
        return self.text


class ReasoningBackend(ABC):
    """Abstract reasoning/retrieval service."""

    @property
    def is_configured(self) -> bool:
        """Whether the backend has the credentials it needs."""
        return True

    @abstractmethod
    async def submit(
        self,
        prompt: str,
        *,
        system: str | None = None,
        web_search: bool = False,
        max_tokens: int = 1000,
    ) -> BackendResult:
        """
        Submit a prompt and return the reply text.

        Args:
            prompt: The user prompt
            system: Optional system instructions
            web_search: Let the backend search the web before answering
            max_tokens: Upper bound on reply length

        Returns:
            BackendResult.success(text) or BackendResult.failure(reason)
        """
        pass


class OpenAIBackend(ReasoningBackend):
    """ReasoningBackend backed by the OpenAI API."""

    def __init__(
        self,
        api_key: str,
        reasoning_model: str = "gpt-4o-mini",
        search_model: str = "gpt-4o",
        timeout: float = 60.0,
        max_retries: int = 1,
    ):
        self.api_key = api_key
        self.reasoning_model = reasoning_model
        self.search_model = search_model
        self.timeout = timeout
        self._client = (
            AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
            if api_key else None
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIBackend":
        return cls(
            api_key=settings.openai_api_key,
            reasoning_model=settings.reasoning_model,
            search_model=settings.search_model,
            timeout=settings.backend_timeout_seconds,
            max_retries=settings.backend_max_retries,
        )

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def submit(
        self,
        prompt: str,
        *,
        system: str | None = None,
        web_search: bool = False,
        max_tokens: int = 1000,
    ) -> BackendResult:
        if self._client is None:
            raise ConfigurationError("OPENAI_API_KEY is not set")

        try:
            if web_search:
                call = self._search(prompt, system, max_tokens)
            else:
                call = self._complete(prompt, system, max_tokens)
            text = await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Backend call timed out after {self.timeout:.0f}s")
            return BackendResult.failure("timeout")
        except openai.APITimeoutError:
            logger.warning("Backend call timed out (client timeout)")
            return BackendResult.failure("timeout")
        except openai.APIError as e:
            logger.warning(f"Backend call failed: {e}")
            return BackendResult.failure(str(e) or e.__class__.__name__)

        if not text:
            return BackendResult.failure("empty reply")
        return BackendResult.success(text)

    async def _complete(self, prompt: str, system: str | None, max_tokens: int) -> str:
        """Plain reasoning call (no retrieval)."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=self.reasoning_model,
            messages=messages,
            temperature=0.1,  # Low temperature for consistent structured output
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ""

    async def _search(self, prompt: str, system: str | None, max_tokens: int) -> str:
        """Reasoning call with web search enabled."""
        response = await self._client.responses.create(
            model=self.search_model,
            instructions=system,
            input=prompt,
            tools=[{"type": "web_search_preview"}],
            max_output_tokens=max_tokens,
        )
        return response.output_text or ""
