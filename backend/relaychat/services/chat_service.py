import logging
from typing import List, Optional, Tuple

from relaychat.core.config import Settings
from relaychat.services.completion_service import CompletionClient
from relaychat.services.conversation import build_history
from relaychat.services.errors import CompletionError, InvalidMessageError
from relaychat.stores.messages import Message, MessageStore


logger = logging.getLogger(__name__)


class ChatService:
    """Runs one chat turn: store the user message, ask the model, store the reply.

    The turn is not transactional. Once the user message is stored it stays
    stored, even if the model call fails afterwards; the session then ends
    with an unanswered user turn.
    """

    def __init__(self, store: MessageStore, completion_client: CompletionClient, settings: Settings):
        self.store = store
        self.completion_client = completion_client
        self.history_limit: Optional[int] = settings.get_history_limit()

    def list_messages(self, session_id: str) -> List[Message]:
        return self.store.list_by_session(session_id)

    async def submit_user_message(self, session_id: str, content: str) -> Tuple[Message, Message]:
        if not isinstance(content, str) or not content.strip():
            raise InvalidMessageError("Message content must not be empty")
        if not session_id:
            raise InvalidMessageError("sessionId is required")

        # Callers never choose the role of the inbound message.
        user_message = self.store.create(session_id, "user", content)

        history = build_history(self.store.list_by_session(session_id), self.history_limit)
        logger.info("Session %s: requesting completion with %d message(s)", session_id, len(history))

        reply = await self.completion_client.complete(history)
        if not reply:
            raise CompletionError("No response from AI")

        ai_message = self.store.create(session_id, "assistant", reply)
        return user_message, ai_message

    def clear_session(self, session_id: str) -> None:
        removed = self.store.clear_session(session_id)
        logger.info("Session %s: cleared %d message(s)", session_id, removed)
