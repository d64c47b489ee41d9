"""Tests for conversation assembly."""

from relaychat.services.conversation import build_history
from relaychat.stores.messages import MessageStore


def test_build_history_projects_role_and_content(store: MessageStore) -> None:
    store.create("s1", "user", "hi")
    store.create("s1", "assistant", "hello")

    assert build_history(store.list_by_session("s1")) == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_build_history_empty() -> None:
    assert build_history([]) == []


def test_build_history_forwards_everything_by_default(store: MessageStore) -> None:
    for i in range(60):
        store.create("s1", "user", str(i))

    history = build_history(store.list_by_session("s1"))
    assert len(history) == 60
    assert history[0]["content"] == "0"


def test_build_history_caps_to_most_recent(store: MessageStore) -> None:
    for i in range(6):
        store.create("s1", "user", str(i))

    history = build_history(store.list_by_session("s1"), max_messages=2)
    assert [h["content"] for h in history] == ["4", "5"]


def test_build_history_ignores_non_positive_limit(store: MessageStore) -> None:
    store.create("s1", "user", "a")
    store.create("s1", "user", "b")

    assert len(build_history(store.list_by_session("s1"), max_messages=0)) == 2
