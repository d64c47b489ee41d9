"""Shared test fixtures."""

import pytest

from relaychat.core.config import Settings
from relaychat.services.chat_service import ChatService
from relaychat.services.completion_service import CompletionClient
from relaychat.stores.messages import MessageStore


class FakeCompletionClient(CompletionClient):
    """Records every history it is asked to complete and replays canned replies."""

    def __init__(self, replies=None, error: Exception | None = None):
        super().__init__(model="fake-model", max_tokens=1000, temperature=0.7)
        self.replies = list(replies or [])
        self.error = error
        self.calls: list[list[dict]] = []

    async def complete(self, history: list[dict]) -> str:
        self.calls.append([dict(turn) for turn in history])
        if self.error is not None:
            raise self.error
        if not self.replies:
            return "ok"
        return self.replies.pop(0)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        app_env="test",
        log_level="INFO",
        cors_origins="*",
        model_provider="openai",
        openai_api_key="test-key",
        chat_model="gpt-4o",
        ollama_host="http://ollama.test:11434",
        max_tokens=1000,
        temperature=0.7,
        history_max_messages=0,
    )


@pytest.fixture
def store() -> MessageStore:
    return MessageStore()


@pytest.fixture
def completion() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def service(store, completion, settings) -> ChatService:
    return ChatService(store, completion, settings)
