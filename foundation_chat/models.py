"""Messages, roles and the provider availability union."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(UTC)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """One immutable transcript entry."""

    role: Role
    text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=Role.USER, text=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role=Role.ASSISTANT, text=text)

    def time_label(self) -> str:
        """Short local clock label shown next to a chat bubble."""
        return self.created_at.astimezone().strftime("%H:%M")


class UnavailableReason(str, Enum):
    DEVICE_NOT_ELIGIBLE = "deviceNotEligible"
    INTELLIGENCE_DISABLED = "intelligenceDisabled"
    MODEL_NOT_READY = "modelNotReady"
    OTHER = "other"


@dataclass(frozen=True)
class Availability:
    """Provider availability as a closed tagged union.

    ``reason is None`` means ``available``. ``UnavailableReason.OTHER`` must
    carry a diagnostic ``detail``; the other reasons must not.
    """

    reason: UnavailableReason | None = None
    detail: str | None = None

    def __post_init__(self) -> None:
        if self.reason is UnavailableReason.OTHER:
            if not self.detail:
                raise ValueError("unavailable(other) requires a diagnostic detail")
        elif self.detail is not None:
            raise ValueError(f"detail is only allowed for unavailable(other), got {self.reason}")

    @classmethod
    def available(cls) -> Availability:
        return cls()

    @classmethod
    def unavailable(cls, reason: UnavailableReason, detail: str | None = None) -> Availability:
        return cls(reason=reason, detail=detail)

    @classmethod
    def other(cls, detail: str) -> Availability:
        return cls(reason=UnavailableReason.OTHER, detail=detail)

    @property
    def is_available(self) -> bool:
        return self.reason is None

    def __str__(self) -> str:
        if self.reason is None:
            return "available"
        if self.reason is UnavailableReason.OTHER:
            return f"unavailable(other({self.detail}))"
        return f"unavailable({self.reason.value})"
