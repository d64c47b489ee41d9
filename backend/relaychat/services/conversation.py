from typing import Iterable, List, Optional

from relaychat.stores.messages import Message


def build_history(messages: Iterable[Message], max_messages: Optional[int] = None) -> List[dict]:
    """Project stored messages into the role/content pairs the model expects.

    Order is preserved and every other field is dropped. With ``max_messages``
    unset the whole session is forwarded; otherwise only the most recent
    ``max_messages`` entries are kept.
    """
    history = [{"role": m.role, "content": m.content} for m in messages]
    if max_messages is not None and max_messages > 0:
        history = history[-max_messages:]
    return history
