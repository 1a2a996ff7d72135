import base64
import json

from models.session_models import Notification
from services.conversation.events import NOTIFICATION, ConversationEvents
from services.conversation.ws_session import ConversationSocketHandler
from services.conversation.templates import ENGLISH
from tests.helpers import png_bytes


class RecordingSocket:
    """Collects what the handler sends."""

    def __init__(self):
        self.sent = []

    async def send_text(self, text):
        self.sent.append(json.loads(text))


def test_notification_history_is_bounded():
    events = ConversationEvents(max_notifications=3)
    for number in range(10):
        events.notify(Notification("n", str(number)))
    assert [note.description for note in events.notifications] == ["7", "8", "9"]


async def test_publish_fans_out_and_counts_subscribers():
    events = ConversationEvents()
    first, second = events.subscribe(), events.subscribe()
    assert events.subscriber_count == 2

    events.notify(Notification("Image Attached", "ok"))
    assert first.get_nowait()["type"] == NOTIFICATION
    assert second.get_nowait()["title"] == "Image Attached"

    events.unsubscribe(first)
    assert events.subscriber_count == 1


async def test_full_queue_drops_events_without_blocking():
    events = ConversationEvents(max_queue=1)
    queue = events.subscribe()
    events.notify(Notification("a", "1"))
    events.notify(Notification("b", "2"))
    assert queue.qsize() == 1


async def test_socket_rejects_invalid_base64_as_unsupported(controller):
    socket = RecordingSocket()
    handler = ConversationSocketHandler(controller)

    await handler.handle(socket, {"type": "attachment.add", "image_b64": "not base64!!", "media_type": "image/png"})

    assert socket.sent == [
        {"type": "attachment.result", "accepted": False, "prompt": None, "reason": "unsupported_type", "request_id": None}
    ]
    assert [note.title for note in controller.events.notifications] == ["Invalid File"]
    assert controller.events.notifications[0].description == ENGLISH.notifications["unsupported_type"].description
    assert controller.state.pending_attachment is None


async def test_socket_attaches_valid_base64_image(controller):
    socket = RecordingSocket()
    handler = ConversationSocketHandler(controller)
    payload = base64.b64encode(png_bytes()).decode()

    await handler.handle(
        socket, {"type": "attachment.add", "request_id": 4, "image_b64": payload, "media_type": "image/png"}
    )

    assert socket.sent[0]["accepted"] is True
    assert socket.sent[0]["request_id"] == 4
    assert controller.state.pending_attachment is not None


async def test_socket_reports_unknown_commands(controller):
    socket = RecordingSocket()
    await ConversationSocketHandler(controller).handle(socket, {"type": "dance", "request_id": "x"})
    assert socket.sent == [{"type": "error", "request_id": "x", "detail": "Unsupported message type."}]
