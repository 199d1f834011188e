import sys
from enum import Enum
from unittest.mock import patch

import pytest

from foundation_chat import (
    AppleFMProvider,
    AppleFMSetupError,
    Availability,
    FakeProvider,
    Provider,
    SessionHandle,
    UnavailableReason,
)
from foundation_chat.providers import availability_from_apple

from .conftest import make_mock_model, make_mock_sdk


class FakeReason(Enum):
    DEVICE_NOT_ELIGIBLE = 1
    APPLE_INTELLIGENCE_NOT_ENABLED = 2
    MODEL_NOT_READY = 3
    SOMETHING_NEW = 4


# ========================================================================
# Apple reason mapping
# ========================================================================


class TestAvailabilityFromApple:
    def test_available(self):
        assert availability_from_apple(True, None) == Availability.available()

    @pytest.mark.parametrize(
        ("reason", "expected"),
        [
            (FakeReason.DEVICE_NOT_ELIGIBLE, UnavailableReason.DEVICE_NOT_ELIGIBLE),
            (FakeReason.APPLE_INTELLIGENCE_NOT_ENABLED, UnavailableReason.INTELLIGENCE_DISABLED),
            (FakeReason.MODEL_NOT_READY, UnavailableReason.MODEL_NOT_READY),
            ("SystemLanguageModelUnavailableReason.MODEL_NOT_READY", UnavailableReason.MODEL_NOT_READY),
            ("deviceNotEligible", UnavailableReason.DEVICE_NOT_ELIGIBLE),
        ],
    )
    def test_known_reasons(self, reason, expected):
        assert availability_from_apple(False, reason) == Availability.unavailable(expected)

    def test_unknown_reason_falls_back_to_other(self):
        result = availability_from_apple(False, FakeReason.SOMETHING_NEW)
        assert result == Availability.other("SOMETHING_NEW")

    def test_missing_reason(self):
        assert availability_from_apple(False, None) == Availability.other("unknown")


# ========================================================================
# AppleFMProvider
# ========================================================================


class TestAppleFMProvider:
    def test_missing_sdk_raises_setup_error(self):
        with patch.dict(sys.modules, {"apple_fm_sdk": None}):
            provider = AppleFMProvider()
            with pytest.raises(AppleFMSetupError, match="apple-fm-sdk"):
                provider.availability()

    def test_availability_uses_system_model(self, mock_sdk):
        sdk, _ = mock_sdk
        provider = AppleFMProvider()
        assert provider.availability() == Availability.available()
        sdk.SystemLanguageModel.assert_called_once_with()

    def test_unavailable_model(self):
        model = make_mock_model(available=False, reason=FakeReason.MODEL_NOT_READY)
        provider = AppleFMProvider(model=model)
        assert provider.availability() == Availability.unavailable(
            UnavailableReason.MODEL_NOT_READY
        )

    def test_probe_failure_is_reported_as_other(self, caplog):
        model = make_mock_model()
        model.is_available.side_effect = RuntimeError("probe exploded")
        provider = AppleFMProvider(model=model)
        assert provider.availability() == Availability.other("probe exploded")

    def test_create_session_with_instructions(self, mock_sdk):
        sdk, _ = mock_sdk
        provider = AppleFMProvider()
        provider.create_session("Be brief.")
        sdk.LanguageModelSession.assert_called_once_with(
            model=provider.model, instructions="Be brief."
        )

    def test_create_session_without_instructions(self, mock_sdk):
        sdk, _ = mock_sdk
        provider = AppleFMProvider()
        provider.create_session()
        sdk.LanguageModelSession.assert_called_once_with(model=provider.model)

    async def test_session_respond_returns_text(self):
        sdk, raw_session = make_mock_sdk(response="こんにちは")
        with patch.dict(sys.modules, {"apple_fm_sdk": sdk}):
            session = AppleFMProvider().create_session()
            assert await session.respond("Hello") == "こんにちは"
        raw_session.respond.assert_awaited_once_with("Hello")

    def test_satisfies_protocols(self, mock_sdk):
        provider = AppleFMProvider()
        assert isinstance(provider, Provider)
        assert isinstance(provider.create_session(), SessionHandle)


# ========================================================================
# FakeProvider
# ========================================================================


class TestFakeProvider:
    async def test_replies_then_echo(self):
        provider = FakeProvider(replies=["first"])
        session = provider.create_session()
        assert await session.respond("a") == "first"
        assert await session.respond("b") == "Echo: b"
        assert provider.prompts == ["a", "b"]

    async def test_scripted_failure(self):
        session = FakeProvider(fail_with="network").create_session()
        with pytest.raises(RuntimeError, match="network"):
            await session.respond("a")
        assert session.in_flight == 0

    def test_create_error(self):
        provider = FakeProvider(create_error=RuntimeError("nope"))
        with pytest.raises(RuntimeError, match="nope"):
            provider.create_session()
        assert provider.sessions == []

    def test_satisfies_protocols(self):
        provider = FakeProvider()
        assert isinstance(provider, Provider)
        assert isinstance(provider.create_session(), SessionHandle)
