"""Environment-driven settings for the assistant."""

from __future__ import annotations

import logging
import os
from typing import Optional

from services.conversation.scheduler import ConversationTimings

DEFAULT_WASTE_MODEL = "gpt-4o-mini"
DEFAULT_ANALYSIS_TIMEOUT = 30.0
DEFAULT_SESSION_IDLE_TIMEOUT = 1800.0


def _env_ms(name: str, default_ms: int) -> float:
    """Read a millisecond value from the environment and return seconds."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default_ms / 1000.0
    try:
        value = int(raw)
    except ValueError:
        logging.error("Ignoring non-integer %s=%r; using %sms", name, raw, default_ms)
        return default_ms / 1000.0
    return max(value, 0) / 1000.0


def load_timings() -> ConversationTimings:
    """Return conversation delays, honoring CHAT_*_DELAY_MS overrides."""
    return ConversationTimings(
        response_delay=_env_ms("CHAT_RESPONSE_DELAY_MS", 1500),
        status_update_delay=_env_ms("CHAT_STATUS_UPDATE_DELAY_MS", 8000),
        reward_delay=_env_ms("CHAT_REWARD_DELAY_MS", 3000),
    )


def waste_model() -> str:
    return os.getenv("WASTE_MODEL", DEFAULT_WASTE_MODEL)


def analysis_timeout() -> Optional[float]:
    """Seconds to wait on the classifier; 0 disables the timeout."""
    raw = os.getenv("WASTE_ANALYSIS_TIMEOUT")
    if raw is None or not raw.strip():
        return DEFAULT_ANALYSIS_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logging.error("Ignoring invalid WASTE_ANALYSIS_TIMEOUT=%r", raw)
        return DEFAULT_ANALYSIS_TIMEOUT
    return value if value > 0 else None


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def session_idle_timeout() -> Optional[float]:
    """Seconds a session without a live socket may sit idle; 0 keeps sessions until deleted."""
    raw = os.getenv("SESSION_IDLE_TIMEOUT")
    if raw is None or not raw.strip():
        return DEFAULT_SESSION_IDLE_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logging.error("Ignoring invalid SESSION_IDLE_TIMEOUT=%r", raw)
        return DEFAULT_SESSION_IDLE_TIMEOUT
    return value if value > 0 else None
