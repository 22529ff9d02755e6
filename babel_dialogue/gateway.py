"""Response gateway - obtains an NPC's reply from a conversational backend.

The dialogue controller depends on the protocol only:

    async def request_reply(self, npc: NPC, text: str) -> str: ...

It returns the reply text, or raises GatewayFailure when there is no usable
reply. Two implementations are provided:

    HttpGateway  - async HTTP client for LLM backends. Supports an
                   OpenAI-compatible chat endpoint and KoboldCpp text
                   completion, selected by provider_format.
    EchoGateway  - answers in character without a network call. Used when
                   no backend URL is configured.

The controller never awaits the gateway directly. The request writes its
outcome into a ResponseSlot and a separate waiter polls the slot, so the
player sees the same "waiting..." cadence whatever the backend does, and the
waiter's timeout bounds how long a silent backend can stall a session.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from babel_dialogue.config import ProviderFormat, Settings
from babel_dialogue.models import NPC
from babel_dialogue.prompts import build_messages, render_prompt
from babel_dialogue.typewriter import Sleep

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol - every gateway implementation must match this signature
# ---------------------------------------------------------------------------

class ResponseGateway(Protocol):
    async def request_reply(self, npc: NPC, text: str) -> str: ...


# ---------------------------------------------------------------------------
# HttpGateway - connects to a real backend
# ---------------------------------------------------------------------------

class HttpGateway:
    """Async HTTP client for conversational backends.

    Supported formats:
      "openai"     - POST /v1/chat/completions  {"model": ..., "messages": [...]}
                     Response: {"choices": [{"message": {"content": "..."}}]}
      "koboldcpp"  - POST /api/v1/generate      {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "http://localhost:5001".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "openai".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 60.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "openai",
        model: str = "",
        timeout: float = 60.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._format = provider_format
        self._model = model
        self._timeout = timeout
        self._auth = {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def _build_request(self, npc: NPC, text: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        messages = build_messages(npc, text)
        if self._format == "koboldcpp":
            url = f"{self._base_url}/api/v1/generate"
            return url, {"prompt": render_prompt(messages, npc.name)}

        url = f"{self._base_url}/v1/chat/completions"
        body: dict = {"messages": [m.model_dump() for m in messages]}
        if self._model:
            body["model"] = self._model
        return url, body

    def _parse_response(self, data: dict) -> str:
        """Extract the reply text from the response body."""
        try:
            if self._format == "koboldcpp":
                return data["results"][0]["text"]
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayFailure(
                f"Unexpected response format from {self._format} backend"
            ) from e

    async def _post(self, url: str, body: dict) -> dict:
        """POST body to url and return the decoded JSON, as GatewayFailure on any error."""
        headers = {"Content-Type": "application/json", **self._auth}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=headers)
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise GatewayFailure(f"Backend timed out after {self._timeout}s") from e
        except httpx.ConnectError as e:
            raise GatewayFailure(f"Cannot connect to backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise GatewayFailure(f"Backend returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GatewayFailure(f"Transport error talking to {self._base_url}: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise GatewayFailure(f"Backend at {self._base_url} sent a body that is not JSON") from e

    async def request_reply(self, npc: NPC, text: str) -> str:
        url, body = self._build_request(npc, text)
        logger.debug("reply request npc=%s url=%s history=%d", npc.name, url, len(npc.messages))

        reply = (self._parse_response(await self._post(url, body)) or "").strip()
        if not reply:
            raise GatewayFailure(f"Backend returned an empty reply for {npc.name}")
        logger.debug("reply received npc=%s len=%d", npc.name, len(reply))
        return reply


# ---------------------------------------------------------------------------
# EchoGateway - offline stand-in; no network calls
# ---------------------------------------------------------------------------

class EchoGateway:
    """Replies by quoting the player back, in the NPC's voice.

    Lets the whole dialogue loop (typewriter, history, queueing) run without
    a backend.
    """

    async def request_reply(self, npc: NPC, text: str) -> str:
        logger.debug("EchoGateway npc=%s text_len=%d", npc.name, len(text))
        return f'"{text}"? {npc.name} considers that for a moment.'


def make_gateway(settings: Settings) -> ResponseGateway:
    if not settings.online:
        return EchoGateway()
    return HttpGateway(
        provider_url=settings.llm_url,
        api_key=settings.llm_api_key,
        provider_format=settings.llm_format,
        model=settings.llm_model,
        timeout=settings.http_timeout,
    )


# ---------------------------------------------------------------------------
# ResponseSlot - the pending-reply slot the controller polls
# ---------------------------------------------------------------------------

class ResponseSlot:
    """Holds the outcome of the one in-flight gateway request.

    Starts unset. The request task calls set() or fail(); the waiter polls
    is_set at a fixed interval.
    """

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        self.reply: str | None = None
        self.error: GatewayFailure | None = None
        self.is_set = False

    def set(self, reply: str) -> None:
        self.reply = reply
        self.is_set = True

    def fail(self, error: GatewayFailure) -> None:
        self.error = error
        self.is_set = True

    async def wait(self, poll_interval: float, timeout: float, sleep: Sleep) -> str:
        """Poll until the slot is set; return the reply or raise its failure."""
        waited = 0.0
        while not self.is_set:
            if waited >= timeout:
                raise GatewayTimeout(f"No reply after {timeout}s")
            await sleep(poll_interval)
            waited += poll_interval
        if self.error is not None:
            raise self.error
        return self.reply


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class GatewayFailure(RuntimeError):
    """Raised when the backend produced no usable reply."""


class GatewayTimeout(GatewayFailure):
    """Raised when no reply arrived within the configured bound."""
