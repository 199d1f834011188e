"""
Error taxonomy for the chat orchestration core.

Rejections (``ValidationError``, ``UnavailableError``, ``BusyError``,
``SessionInitError``) are raised to the immediate caller of
``SessionController.send``. ``ProviderRequestError`` is never raised out of
``send``; it is recorded on the controller and mirrored into the transcript.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Availability


class ChatError(Exception):
    """Base class for every error surfaced by foundation_chat."""


class ValidationError(ChatError):
    """The prompt is empty once leading/trailing whitespace is trimmed."""

    def __init__(self, message: str = "Prompt is empty.") -> None:
        super().__init__(message)


class UnavailableError(ChatError):
    """The provider was not ``available`` when a prompt was submitted."""

    def __init__(self, availability: Availability) -> None:
        self.availability = availability
        super().__init__(f"モデルが利用できません。現在のステータス: {availability}")


class BusyError(ChatError):
    """A request is already in flight."""

    def __init__(self, message: str = "A request is already in flight.") -> None:
        super().__init__(message)


class SessionInitError(ChatError):
    """The provider session could not be created.

    Terminal for the controller that raised it: there is no reset.
    """


class ProviderRequestError(ChatError):
    """The in-flight provider request failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class AppleFMSetupError(ChatError):
    """The Apple Foundation Models SDK is not importable."""


APPLE_FM_INSTALL_HINT = (
    "\n\n[FoundationChat] Error: 'apple-fm-sdk' is not installed.\n"
    "The Apple provider requires the Apple Foundation Models SDK to be installed manually.\n"
    "Use '--provider fake' to run without it.\n"
)
