import logging

from foundation_chat import ConversationStore, Message


class TestConversationStore:
    def test_starts_empty(self, store):
        assert store.snapshot() == ()
        assert store.is_empty
        assert store.last() is None

    def test_append_preserves_order(self, store):
        messages = [Message.user("one"), Message.assistant("two"), Message.user("three")]
        for message in messages:
            store.append(message)
        assert store.snapshot() == tuple(messages)
        assert len(store) == 3
        assert store.last() is messages[-1]
        assert list(store) == messages

    def test_snapshot_is_detached(self, store):
        store.append(Message.user("one"))
        snapshot = store.snapshot()
        store.append(Message.user("two"))
        assert len(snapshot) == 1

    def test_clear_empties_immediately(self, store):
        store.append(Message.user("one"))
        store.append(Message.assistant("two"))
        store.clear()
        assert store.snapshot() == ()
        assert store.is_empty

    def test_clear_on_empty_store(self, store):
        store.clear()
        assert store.snapshot() == ()


class TestTranscriptNotifications:
    def test_listener_receives_snapshots(self, store):
        seen = []
        store.subscribe(seen.append)
        first = Message.user("one")
        store.append(first)
        store.clear()
        assert seen == [(first,), ()]

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        store.append(Message.user("one"))
        assert seen == []

    def test_failing_listener_is_logged_and_isolated(self, caplog):
        store = ConversationStore()
        seen = []

        def broken(snapshot):
            raise RuntimeError("listener boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        with caplog.at_level(logging.WARNING, logger="foundation_chat.store"):
            store.append(Message.user("one"))

        assert len(store) == 1
        assert len(seen) == 1
        assert any("listener failed" in r.message for r in caplog.records)
