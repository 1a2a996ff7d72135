import asyncio
import io
import time
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image

from services.conversation.scheduler import ConversationTimings

FAST_TIMINGS = ConversationTimings(response_delay=0.01, status_update_delay=0.08, reward_delay=0.03)

ORGANIC_RESULT = {"category": "organic", "sub_types": ["banana peel", "vegetable scraps"], "confidence": 0.874}


class FakeClassifier:
    """Stand-in for the external waste classifier."""

    def __init__(self, result: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None, gate=None):
        self.result = dict(result or ORGANIC_RESULT)
        self.error = error
        self.gate: Optional[asyncio.Event] = gate
        self.calls: List[Tuple[bytes, str, Optional[str]]] = []

    async def classify(self, image_b64: bytes, *, media_type: str = "image/jpeg", text_hint: Optional[str] = None):
        self.calls.append((image_b64, media_type, text_hint))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return dict(self.result)


class FakeSink:
    """Records saved turns instead of writing to SQLite."""

    def __init__(self, error: Optional[Exception] = None):
        self.turns: List[Tuple[Optional[str], str, str]] = []
        self.error = error

    async def save_turn(self, user_id, user_message, bot_response):
        if self.error is not None:
            raise self.error
        self.turns.append((user_id, user_message, bot_response))
        return len(self.turns)


def png_bytes(size=(32, 24), color=(30, 160, 60)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.005) -> None:
    """Poll `predicate` on the running loop until it holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


def poll(predicate, timeout: float = 3.0, interval: float = 0.02):
    """Blocking variant of `wait_until` for TestClient tests; returns the predicate's value."""
    deadline = time.monotonic() + timeout
    while True:
        value = predicate()
        if value:
            return value
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        time.sleep(interval)
