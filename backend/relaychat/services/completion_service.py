import asyncio
import json
import logging
from typing import List, Optional, Sequence

import aiohttp
import openai

from relaychat.core.config import Settings
from relaychat.services.errors import CompletionError


logger = logging.getLogger(__name__)

_LOCALHOST_FALLBACK = "http://localhost:11434"
KEEP_ALIVE_DEFAULT = "5m"


class CompletionClient:
    """Turns an ordered role/content history into one completion string.

    Generation parameters are fixed at construction; callers only supply the
    history. An empty string means the provider answered without text.
    """

    def __init__(self, model: str, max_tokens: int, temperature: float):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, history: List[dict]) -> str:
        raise NotImplementedError


class OpenAICompletionClient(CompletionClient):
    def __init__(self, api_key: str, model: str, max_tokens: int, temperature: float, client=None):
        super().__init__(model, max_tokens, temperature)
        self._client = client or openai.AsyncOpenAI(api_key=api_key)

    async def complete(self, history: List[dict]) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=history,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.OpenAIError as exc:
            raise CompletionError(str(exc) or "Model request failed") from exc
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


class OllamaCompletionClient(CompletionClient):
    """Non-streaming client for Ollama's /api/chat endpoint."""

    def __init__(
        self,
        host: str,
        model: str,
        max_tokens: int,
        temperature: float,
        fallback_hosts: Sequence[str] = (_LOCALHOST_FALLBACK,),
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        super().__init__(model, max_tokens, temperature)
        # None keeps aiohttp's default session timeout.
        self.timeout = timeout
        self.host = host.rstrip("/")
        self.fallback_hosts = tuple(h.rstrip("/") for h in fallback_hosts)

    def _host_candidates(self):
        """Yield configured host plus fallbacks (deduped)."""
        seen = set()
        for host in (self.host,) + self.fallback_hosts:
            if host and host not in seen:
                seen.add(host)
                yield host

    def _session_kwargs(self) -> dict:
        return {"timeout": self.timeout} if self.timeout is not None else {}

    def _payload(self, history: List[dict]) -> dict:
        return {
            "model": self.model,
            "messages": history,
            "stream": False,
            "keep_alive": KEEP_ALIVE_DEFAULT,
            "options": {"num_predict": self.max_tokens, "temperature": self.temperature},
        }

    async def complete(self, history: List[dict]) -> str:
        payload = self._payload(history)
        last_exc: Optional[Exception] = None
        for host in self._host_candidates():
            try:
                async with aiohttp.ClientSession(**self._session_kwargs()) as session:
                    async with session.post(f"{host}/api/chat", json=payload) as resp:
                        raw = await resp.text()
                        if resp.status != 200:
                            raise CompletionError(_error_message(raw, resp.status))
                        return _message_content(raw)
            except aiohttp.ClientConnectionError as exc:
                logger.warning("Ollama unreachable at %s: %s", host, exc)
                last_exc = exc
            except aiohttp.ClientError as exc:
                raise CompletionError(f"Model request failed: {exc}") from exc
            except asyncio.TimeoutError as exc:
                raise CompletionError("Model request timed out") from exc
        raise CompletionError(f"Unable to reach Ollama: {last_exc}")


def _error_message(raw: str, status: int) -> str:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return f"HTTP {status} from model service"
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {status} from model service"


def _message_content(raw: str) -> str:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CompletionError("Malformed response from model service") from exc
    if not isinstance(data, dict):
        raise CompletionError("Malformed response from model service")
    message = data.get("message") or {}
    if not isinstance(message, dict):
        raise CompletionError("Malformed response from model service")
    return message.get("content") or ""


def build_completion_client(settings: Settings) -> CompletionClient:
    provider = settings.model_provider
    if provider == "openai":
        return OpenAICompletionClient(
            api_key=settings.openai_api_key,
            model=settings.chat_model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )
    if provider == "ollama":
        return OllamaCompletionClient(
            host=settings.ollama_host,
            model=settings.chat_model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )
    raise ValueError(f"Unknown MODEL_PROVIDER: {provider!r}")
