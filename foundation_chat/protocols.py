"""
Provider protocols consumed by the orchestration core.

The core only needs three things from a language-model backend: report
availability, create a session, and answer one prompt at a time on that
session. Concrete backends live in ``foundation_chat.providers``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import Availability


@runtime_checkable
class SessionHandle(Protocol):
    """A stateful conversational context held by the provider."""

    async def respond(self, prompt: str) -> str: ...


@runtime_checkable
class Provider(Protocol):
    """A language-model runtime that can report availability and open sessions."""

    def availability(self) -> Availability: ...

    def create_session(self, instructions: str | None = None) -> SessionHandle: ...
