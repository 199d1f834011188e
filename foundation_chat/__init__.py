"""
foundation-chat: conversation and session orchestration for on-device language models.

The core tracks a linear transcript (``ConversationStore``), maps provider
availability to UI affordances (``AvailabilityGate``) and sequences a single
in-flight request per session (``SessionController``). Providers plug in
through the small ``Provider`` / ``SessionHandle`` protocols; the Apple
Foundation Models SDK is only imported when ``AppleFMProvider`` is used.
"""

from .config import ChatConfig
from .controller import ControllerState, SessionController
from .exceptions import (
    AppleFMSetupError,
    BusyError,
    ChatError,
    ProviderRequestError,
    SessionInitError,
    UnavailableError,
    ValidationError,
)
from .gate import AvailabilityGate, Banner, GateDecision, GateStatus, banner, classify
from .models import Availability, Message, Role, UnavailableReason
from .protocols import Provider, SessionHandle
from .providers import AppleFMProvider, FakeProvider, FakeSession
from .store import ConversationStore

__all__ = [
    "AppleFMProvider",
    "AppleFMSetupError",
    "Availability",
    "AvailabilityGate",
    "Banner",
    "BusyError",
    "ChatConfig",
    "ChatError",
    "ControllerState",
    "ConversationStore",
    "FakeProvider",
    "FakeSession",
    "GateDecision",
    "GateStatus",
    "Message",
    "Provider",
    "ProviderRequestError",
    "Role",
    "SessionController",
    "SessionHandle",
    "SessionInitError",
    "UnavailableError",
    "UnavailableReason",
    "ValidationError",
    "banner",
    "classify",
]
