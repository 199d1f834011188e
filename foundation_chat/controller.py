"""
Session orchestration: lazy session creation and single-flight sends.

A ``SessionController`` owns one provider session and one busy flag. Every
accepted prompt produces exactly one terminal transcript entry: the
provider's reply, or an assistant message describing the failure.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum

from .config import ChatConfig
from .exceptions import (
    BusyError,
    ChatError,
    ProviderRequestError,
    SessionInitError,
    UnavailableError,
    ValidationError,
)
from .gate import classify
from .models import Availability, Message
from .protocols import Provider, SessionHandle
from .store import ConversationStore

logger = logging.getLogger("foundation_chat.controller")

ERROR_MESSAGE_PREFIX = "エラーが発生しました: "
SESSION_MISSING_MESSAGE = "セッションが初期化されていません"
REQUEST_CANCELLED_REASON = "Request cancelled."


class ControllerState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


class SessionController:
    """Drives one provider session and appends the exchange to a store.

    All methods must be called from the same event loop. The busy flag is
    checked and set without an intervening ``await``, so concurrent ``send``
    calls on that loop cannot both reach the provider.
    """

    def __init__(
        self,
        provider: Provider,
        store: ConversationStore | None = None,
        config: ChatConfig | None = None,
    ) -> None:
        self.provider = provider
        self.store = store if store is not None else ConversationStore()
        self.config = config if config is not None else ChatConfig()
        self._session: SessionHandle | None = None
        self._init_error: SessionInitError | None = None
        self._busy = False
        self._last_error: ChatError | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        return ControllerState.BUSY if self._busy else ControllerState.IDLE

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def has_session(self) -> bool:
        return self._session is not None

    @property
    def last_error(self) -> ChatError | None:
        return self._last_error

    def consume_error(self) -> ChatError | None:
        """Return the pending user-facing error and clear it."""
        error, self._last_error = self._last_error, None
        return error

    def can_submit(self, text: str, availability: Availability | None = None) -> bool:
        """Whether the send affordance should be enabled for *text*."""
        if self._busy or not text.strip():
            return False
        return classify(self._availability(availability)).input_enabled

    @property
    def can_clear(self) -> bool:
        return not self._busy and not self.store.is_empty

    def clear_transcript(self) -> None:
        if self._busy:
            raise BusyError("Cannot clear the transcript while a request is in flight.")
        self.store.clear()
        logger.debug("[FoundationChat Session] Transcript cleared.")

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def ensure_session(self, availability: Availability | None = None) -> SessionHandle | None:
        """Create the provider session once, when the provider is available.

        Returns the session, or ``None`` when the provider is not available.
        Raises ``SessionInitError`` if creation fails now or failed before.
        """
        if self._session is not None:
            logger.debug("[FoundationChat Session] Session already initialized.")
            return self._session
        availability = self._availability(availability)
        if not availability.is_available:
            logger.debug(
                "[FoundationChat Session] Skipping session init; provider is %s.", availability
            )
            return None
        if self._init_error is not None:
            raise SessionInitError(str(self._init_error)) from self._init_error.__cause__

        logger.info("[FoundationChat Session] Initializing provider session...")
        try:
            session = self.provider.create_session(self.config.instructions)
        except Exception as exc:
            error = SessionInitError(f"{SESSION_MISSING_MESSAGE}: {exc}")
            error.__cause__ = exc
            self._init_error = error
            logger.error("[FoundationChat Session] Session init failed: %s", exc, exc_info=True)
            raise error from exc

        self._session = session
        logger.info("[FoundationChat Session] Session ready.")
        return session

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send(
        self,
        prompt: str,
        availability: Availability | None = None,
        *,
        clear_input: Callable[[], None] | None = None,
    ) -> Message:
        """Submit *prompt* and return the assistant message appended for it.

        Raises ``ValidationError``, ``UnavailableError``, ``BusyError`` or
        ``SessionInitError`` without touching the transcript. Provider
        failures are not raised: the returned message carries the error text
        and ``last_error`` holds a ``ProviderRequestError``. If the task
        running ``send`` is cancelled, the failure message is still appended
        before ``asyncio.CancelledError`` propagates.

        *clear_input* is called once the prompt has been accepted, so the
        caller can empty its input buffer.
        """
        text = prompt.strip()
        if not text:
            raise ValidationError()

        availability = self._availability(availability)
        logger.debug("[FoundationChat Session] Model availability: %s", availability)
        if not availability.is_available:
            error = UnavailableError(availability)
            self._last_error = error
            logger.warning("[FoundationChat Session] %s", error)
            raise error

        if self._busy:
            raise BusyError()

        try:
            session = self.ensure_session(availability)
        except SessionInitError as exc:
            self._last_error = exc
            raise

        self._busy = True
        try:
            self.store.append(Message.user(text))
            if clear_input is not None:
                clear_input()

            start_time = time.perf_counter()
            try:
                content = await self._request(session, text)
            except asyncio.CancelledError:
                error = ProviderRequestError(REQUEST_CANCELLED_REASON)
                self._last_error = error
                logger.warning(
                    "[FoundationChat Session] Request cancelled after %.3fs.",
                    time.perf_counter() - start_time,
                )
                self.store.append(Message.assistant(f"{ERROR_MESSAGE_PREFIX}{error.reason}"))
                raise
            except Exception as exc:
                reason = str(exc) or type(exc).__name__
                error = ProviderRequestError(reason)
                error.__cause__ = exc
                self._last_error = error
                logger.error(
                    "[FoundationChat Session] Request failed after %.3fs: %s",
                    time.perf_counter() - start_time,
                    reason,
                    exc_info=True,
                )
                reply = Message.assistant(f"{ERROR_MESSAGE_PREFIX}{reason}")
            else:
                logger.info(
                    "[FoundationChat Session] Response received in %.3fs (%d chars).",
                    time.perf_counter() - start_time,
                    len(content),
                )
                logger.debug("[FoundationChat Session] Response preview: %s...", content[:50])
                reply = Message.assistant(content)

            self.store.append(reply)
            return reply
        finally:
            self._busy = False

    async def _request(self, session: SessionHandle, prompt: str) -> str:
        timeout = self.config.request_timeout
        if timeout is None:
            return await session.respond(prompt)
        try:
            return await asyncio.wait_for(session.respond(prompt), timeout=timeout)
        except TimeoutError as exc:
            raise ProviderRequestError(
                f"Timed out waiting for response after {timeout:g}s."
            ) from exc

    def _availability(self, availability: Availability | None) -> Availability:
        return self.provider.availability() if availability is None else availability

    def __repr__(self) -> str:
        return (
            f"SessionController(provider={self.provider!r}, state={self.state.value}, "
            f"has_session={self.has_session})"
        )
