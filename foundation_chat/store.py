from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from .models import Message

logger = logging.getLogger("foundation_chat.store")

TranscriptListener = Callable[[tuple[Message, ...]], None]


class ConversationStore:
    """Append-only transcript with whole-collection clearing.

    Listeners receive the new snapshot after every ``append`` and ``clear``;
    presentation layers use this to scroll to the newest message.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._listeners: list[TranscriptListener] = []

    def append(self, message: Message) -> None:
        self._messages.append(message)
        self._notify()

    def clear(self) -> None:
        self._messages = []
        self._notify()

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    @property
    def is_empty(self) -> bool:
        return not self._messages

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """Register *listener*; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.warning("[FoundationChat Store] Transcript listener failed.", exc_info=True)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"ConversationStore(messages={len(self._messages)})"
