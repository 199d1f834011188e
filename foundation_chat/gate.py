"""
Availability gate: provider availability in, UI affordances out.

``classify`` is the pure mapping. ``AvailabilityGate`` keeps the latest
decision so callers polling the provider only log real transitions, and
``banner`` supplies the status banner text for each state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .models import Availability, UnavailableReason

if TYPE_CHECKING:
    from .protocols import Provider

logger = logging.getLogger("foundation_chat.gate")


class GateStatus(str, Enum):
    READY = "ready"
    DEVICE_INELIGIBLE = "device_ineligible"
    FEATURE_DISABLED = "feature_disabled"
    LOADING = "loading"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class GateDecision:
    status: GateStatus
    input_enabled: bool
    detail: str | None = None

    def __str__(self) -> str:
        if self.status is GateStatus.UNKNOWN:
            return f"{self.status.value}({self.detail})"
        return self.status.value


@dataclass(frozen=True)
class Banner:
    title: str
    detail: str
    hint: str | None = None
    busy_indicator: bool = False


_STATUS_BY_REASON = {
    UnavailableReason.DEVICE_NOT_ELIGIBLE: GateStatus.DEVICE_INELIGIBLE,
    UnavailableReason.INTELLIGENCE_DISABLED: GateStatus.FEATURE_DISABLED,
    UnavailableReason.MODEL_NOT_READY: GateStatus.LOADING,
}


def classify(availability: Availability) -> GateDecision:
    """Map provider availability to a status and whether input is enabled."""
    if availability.is_available:
        return GateDecision(GateStatus.READY, input_enabled=True)
    if availability.reason is UnavailableReason.OTHER:
        return GateDecision(GateStatus.UNKNOWN, input_enabled=False, detail=availability.detail)
    return GateDecision(_STATUS_BY_REASON[availability.reason], input_enabled=False)


def banner(decision: GateDecision) -> Banner:
    status = decision.status
    if status is GateStatus.READY:
        return Banner("FoundationModels 利用可能", "Apple Intelligence が正常に動作しています")
    if status is GateStatus.DEVICE_INELIGIBLE:
        return Banner(
            "デバイス非対応",
            "このデバイスは Apple Intelligence に対応していません",
            hint="対応デバイス: A17 Pro / M-series チップ搭載デバイス",
        )
    if status is GateStatus.FEATURE_DISABLED:
        return Banner(
            "Apple Intelligence 無効",
            "設定 > Apple Intelligence & Siri で有効にしてください",
        )
    if status is GateStatus.LOADING:
        return Banner(
            "モデル準備中",
            "モデルをダウンロード・初期化中です。しばらくお待ちください。",
            busy_indicator=True,
        )
    return Banner("利用不可", f"モデルを利用できません: {decision.detail}")


class AvailabilityGate:
    """Tracks the latest availability decision."""

    def __init__(self) -> None:
        self._decision: GateDecision | None = None

    @property
    def decision(self) -> GateDecision | None:
        return self._decision

    @property
    def input_enabled(self) -> bool:
        return self._decision is not None and self._decision.input_enabled

    def update(self, availability: Availability) -> GateDecision:
        decision = classify(availability)
        if decision != self._decision:
            logger.info(
                "[FoundationChat Gate] Availability changed: %s -> %s (%s)",
                self._decision,
                decision,
                availability,
            )
            self._decision = decision
        return decision

    def refresh(self, provider: Provider) -> GateDecision:
        """Poll *provider* and update the current decision."""
        return self.update(provider.availability())
