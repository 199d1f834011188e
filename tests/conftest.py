"""Shared fixtures and helpers for the foundation_chat test-suite."""

import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from foundation_chat import (
    Availability,
    ChatConfig,
    ConversationStore,
    FakeProvider,
    SessionController,
    UnavailableReason,
)


def make_mock_model(available=True, reason=None):
    """Build a MagicMock standing in for ``apple_fm_sdk.SystemLanguageModel()``."""
    model = MagicMock()
    model.is_available.return_value = (available, reason)
    return model


def make_mock_sdk(model=None, response="model reply"):
    """Build a fake ``apple_fm_sdk`` module exposing the two classes we use."""
    session = MagicMock()
    session.respond = AsyncMock(return_value=response)
    sdk = SimpleNamespace(
        SystemLanguageModel=MagicMock(return_value=model or make_mock_model()),
        LanguageModelSession=MagicMock(return_value=session),
    )
    return sdk, session


@pytest.fixture
def mock_sdk():
    sdk, session = make_mock_sdk()
    with patch.dict(sys.modules, {"apple_fm_sdk": sdk}):
        yield sdk, session


@pytest.fixture
def provider():
    return FakeProvider(replies=["Hello! How can I help?"])


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def controller(provider, store):
    return SessionController(provider, store=store, config=ChatConfig(instructions=None))


@pytest.fixture
def model_not_ready():
    return Availability.unavailable(UnavailableReason.MODEL_NOT_READY)
