import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    id: str
    session_id: str
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=_utcnow)

    def as_json(self) -> dict:
        """Wire shape used by the HTTP API and the browser client."""
        ts = self.timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds")
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "role": self.role,
            "content": self.content,
            "timestamp": ts.replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class User:
    id: str
    username: str
    password: str


class MessageStore:
    """In-memory message store, one instance per process.

    Messages are keyed by id; a secondary index keeps each session's ids in
    insertion order so a session lookup never scans other sessions.
    """

    def __init__(self):
        self._messages: Dict[str, Message] = {}
        self._by_session: Dict[str, List[str]] = {}
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def list_by_session(self, session_id: str) -> List[Message]:
        with self._lock:
            ids = list(self._by_session.get(session_id, ()))
            found = [self._messages[mid] for mid in ids]
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(found, key=lambda m: m.timestamp)

    def create(self, session_id: str, role: str, content: str) -> Message:
        with self._lock:
            mid = str(uuid.uuid4())
            while mid in self._messages:
                mid = str(uuid.uuid4())
            message = Message(id=mid, session_id=session_id, role=role, content=content, timestamp=_utcnow())
            self._messages[mid] = message
            self._by_session.setdefault(session_id, []).append(mid)
        return message

    def clear_session(self, session_id: str) -> int:
        with self._lock:
            ids = self._by_session.pop(session_id, [])
            for mid in ids:
                self._messages.pop(mid, None)
        return len(ids)

    def count(self, session_id: Optional[str] = None) -> int:
        """Number of stored messages, overall or for one session.

        Diagnostics only; no route calls it.
        """
        with self._lock:
            if session_id is None:
                return len(self._messages)
            return len(self._by_session.get(session_id, ()))

    # Users are part of the store surface but no route uses them yet.

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.username == username), None)

    def create_user(self, username: str, password: str) -> User:
        with self._lock:
            user = User(id=str(uuid.uuid4()), username=username, password=password)
            self._users[user.id] = user
        return user
