from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

SYSTEM_INSTRUCTIONS = (
    "You are a helpful assistant running entirely on the on-device foundation model. "
    "Answer accurately and say so when you are unsure."
)
DEFAULT_REQUEST_TIMEOUT_SECONDS: float | None = None
DEFAULT_LOG_LEVEL = "warning"

logger = logging.getLogger("foundation_chat")


def resolve_log_level(level: str | int, fallback: int = logging.WARNING) -> int:
    """Turn ``"info"``, ``"20"`` or ``20`` into a logging level number."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        if level.isdigit():
            return int(level)
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            return resolved
    logger.warning(
        "[FoundationChat] Unsupported log level '%s'; falling back to %s.",
        level,
        logging.getLevelName(fallback),
    )
    return fallback


@dataclass
class ChatConfig:
    """Settings shared by the controller and the terminal surface."""

    instructions: str | None = SYSTEM_INSTRUCTIONS
    request_timeout: float | None = DEFAULT_REQUEST_TIMEOUT_SECONDS
    log_level: str | int = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ChatConfig:
        """Build a config from loose values, ignoring ``None`` entries."""
        timeout = data.get("request_timeout")
        instructions = data.get("instructions")
        log_level = data.get("log_level")
        return cls(
            instructions=SYSTEM_INSTRUCTIONS if instructions is None else (instructions or None),
            request_timeout=None if timeout is None else float(timeout),
            log_level=DEFAULT_LOG_LEVEL if log_level is None else log_level,
        )

    @property
    def log_level_number(self) -> int:
        return resolve_log_level(self.log_level)
