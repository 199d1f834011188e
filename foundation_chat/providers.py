"""
Concrete providers.

- ``AppleFMProvider`` talks to the on-device Apple Foundation Models runtime
  through ``apple_fm_sdk`` (imported lazily so the core works without it).
- ``FakeProvider`` is deterministic: fixed or echoed replies, optional delay,
  scripted failures. Used by the test-suite and by ``--provider fake``.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
import re
from collections import deque
from collections.abc import Iterable
from typing import Any

from .exceptions import APPLE_FM_INSTALL_HINT, AppleFMSetupError
from .models import Availability, UnavailableReason

logger = logging.getLogger("foundation_chat.providers")

# Normalized SDK reason names -> availability reasons.
_APPLE_REASONS = {
    "devicenoteligible": UnavailableReason.DEVICE_NOT_ELIGIBLE,
    "appleintelligencenotenabled": UnavailableReason.INTELLIGENCE_DISABLED,
    "intelligencenotenabled": UnavailableReason.INTELLIGENCE_DISABLED,
    "intelligencedisabled": UnavailableReason.INTELLIGENCE_DISABLED,
    "modelnotready": UnavailableReason.MODEL_NOT_READY,
}


def load_apple_fm() -> Any:
    """Import ``apple_fm_sdk`` or raise ``AppleFMSetupError``."""
    try:
        return importlib.import_module("apple_fm_sdk")
    except ImportError as exc:
        raise AppleFMSetupError(APPLE_FM_INSTALL_HINT) from exc


def availability_from_apple(is_available: bool, reason: Any) -> Availability:
    """Translate ``SystemLanguageModel.is_available()`` output."""
    if is_available:
        return Availability.available()
    if reason is None:
        return Availability.other("unknown")
    name = getattr(reason, "name", None) or str(reason)
    name = name.rsplit(".", 1)[-1]
    key = re.sub(r"[^a-z]", "", name.lower())
    mapped = _APPLE_REASONS.get(key)
    if mapped is None:
        return Availability.other(name)
    return Availability.unavailable(mapped)


class AppleFMSession:
    """``SessionHandle`` backed by ``apple_fm_sdk.LanguageModelSession``."""

    def __init__(self, session: Any) -> None:
        self._session = session

    async def respond(self, prompt: str) -> str:
        response = await self._session.respond(prompt)
        return str(response)

    def __repr__(self) -> str:
        return f"AppleFMSession(session={self._session!r})"


class AppleFMProvider:
    """``Provider`` backed by the system language model."""

    def __init__(self, model: Any | None = None) -> None:
        self._model = model

    @property
    def model(self) -> Any:
        if self._model is None:
            fm = load_apple_fm()
            self._model = fm.SystemLanguageModel()
        return self._model

    def availability(self) -> Availability:
        try:
            is_available, reason = self.model.is_available()
        except AppleFMSetupError:
            raise
        except Exception as exc:
            logger.warning(
                "[FoundationChat Provider] Availability probe failed: %s", exc, exc_info=True
            )
            return Availability.other(str(exc) or type(exc).__name__)
        return availability_from_apple(is_available, reason)

    def create_session(self, instructions: str | None = None) -> AppleFMSession:
        fm = load_apple_fm()
        if instructions:
            session = fm.LanguageModelSession(model=self.model, instructions=instructions)
        else:
            session = fm.LanguageModelSession(model=self.model)
        return AppleFMSession(session)

    def __repr__(self) -> str:
        return f"AppleFMProvider(model={self._model!r})"


class FakeSession:
    """Deterministic ``SessionHandle``.

    Replies are taken from *replies* in order, then fall back to echoing the
    prompt. When *hold* is given, every ``respond`` waits for it to be set.
    """

    def __init__(
        self,
        replies: Iterable[str] = (),
        delay: float = 0.0,
        fail_with: str | None = None,
        hold: asyncio.Event | None = None,
        instructions: str | None = None,
    ) -> None:
        self._replies = deque(replies)
        self.delay = delay
        self.fail_with = fail_with
        self.hold = hold
        self.instructions = instructions
        self.prompts: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def respond(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.hold is not None:
                await self.hold.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                raise RuntimeError(self.fail_with)
            if self._replies:
                return self._replies.popleft()
            return f"Echo: {prompt}"
        finally:
            self.in_flight -= 1

    def __repr__(self) -> str:
        return f"FakeSession(prompts={len(self.prompts)}, delay={self.delay})"


class FakeProvider:
    """Deterministic ``Provider`` with scripted availability and failures."""

    def __init__(
        self,
        availability: Availability | None = None,
        replies: Iterable[str] = (),
        delay: float = 0.0,
        fail_with: str | None = None,
        create_error: Exception | None = None,
        hold: asyncio.Event | None = None,
    ) -> None:
        self._availability = availability or Availability.available()
        self.replies = list(replies)
        self.delay = delay
        self.fail_with = fail_with
        self.create_error = create_error
        self.hold = hold
        self.sessions: list[FakeSession] = []
        self.availability_checks = 0

    def availability(self) -> Availability:
        self.availability_checks += 1
        return self._availability

    def set_availability(self, availability: Availability) -> None:
        self._availability = availability

    def create_session(self, instructions: str | None = None) -> FakeSession:
        if self.create_error is not None:
            raise self.create_error
        session = FakeSession(
            replies=self.replies,
            delay=self.delay,
            fail_with=self.fail_with,
            hold=self.hold,
            instructions=instructions,
        )
        self.sessions.append(session)
        return session

    @property
    def prompts(self) -> list[str]:
        return [prompt for session in self.sessions for prompt in session.prompts]

    def __repr__(self) -> str:
        return f"FakeProvider(availability={self._availability}, sessions={len(self.sessions)})"
