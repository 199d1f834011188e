import dataclasses
from datetime import UTC

import pytest

from foundation_chat import Availability, Message, Role, UnavailableReason


class TestMessage:
    def test_ids_are_unique(self):
        first = Message.user("a")
        second = Message.user("a")
        assert first.id != second.id

    def test_factories_set_role(self):
        assert Message.user("hi").role is Role.USER
        assert Message.assistant("hello").role is Role.ASSISTANT

    def test_created_at_is_utc(self):
        message = Message.user("hi")
        assert message.created_at.tzinfo is UTC

    def test_message_is_immutable(self):
        message = Message.user("hi")
        with pytest.raises(dataclasses.FrozenInstanceError):
            message.text = "changed"

    def test_time_label_is_hours_and_minutes(self):
        label = Message.user("hi").time_label()
        hours, minutes = label.split(":")
        assert len(hours) == 2 and len(minutes) == 2


class TestAvailability:
    def test_available(self):
        availability = Availability.available()
        assert availability.is_available
        assert str(availability) == "available"

    def test_unavailable_reason_rendering(self):
        availability = Availability.unavailable(UnavailableReason.MODEL_NOT_READY)
        assert not availability.is_available
        assert str(availability) == "unavailable(modelNotReady)"

    def test_other_carries_detail(self):
        availability = Availability.other("thermal throttling")
        assert availability.reason is UnavailableReason.OTHER
        assert str(availability) == "unavailable(other(thermal throttling))"

    def test_other_requires_detail(self):
        with pytest.raises(ValueError):
            Availability.unavailable(UnavailableReason.OTHER)

    def test_detail_rejected_for_known_reasons(self):
        with pytest.raises(ValueError):
            Availability.unavailable(UnavailableReason.DEVICE_NOT_ELIGIBLE, detail="nope")

    def test_equality(self):
        assert Availability.available() == Availability.available()
        assert Availability.other("x") != Availability.other("y")
