import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from relaychat.deps.chat import get_chat_service
from relaychat.services.chat_service import ChatService


router = APIRouter(prefix="/api", tags=["Messages"])
logger = logging.getLogger(__name__)


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    # Accepted for wire compatibility; the service always stores "user".
    role: str = "user"
    sessionId: str = Field(..., min_length=1)


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.get("/messages/{session_id}")
def list_messages(session_id: str, service: ChatService = Depends(get_chat_service)):
    try:
        return [m.as_json() for m in service.list_messages(session_id)]
    except Exception:
        logger.exception("Error fetching messages for session %s", session_id)
        return _error("Failed to fetch messages")


@router.post("/messages")
async def create_message(body: MessageCreate, service: ChatService = Depends(get_chat_service)):
    try:
        user_message, ai_message = await service.submit_user_message(body.sessionId, body.content)
    except Exception as exc:
        logger.exception("Error processing message for session %s", body.sessionId)
        return _error(str(exc) or "Failed to process message")
    return {"userMessage": user_message.as_json(), "aiMessage": ai_message.as_json()}


@router.delete("/messages/{session_id}")
def clear_messages(session_id: str, service: ChatService = Depends(get_chat_service)):
    try:
        service.clear_session(session_id)
    except Exception:
        logger.exception("Error clearing session %s", session_id)
        return _error("Failed to clear session")
    return {"success": True}
