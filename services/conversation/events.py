"""Output event channel between the conversation engine and its renderers."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Deque, Dict, Set

from models.session_models import Message, Notification, SessionState

LOGGER = logging.getLogger(__name__)

MESSAGE_APPENDED = "message.appended"
MESSAGE_REPLACED = "message.replaced"
NOTIFICATION = "notification"
SESSION_STATE = "session.state"


class ConversationEvents:
	"""Fan out conversation events to subscriber queues without blocking."""

	def __init__(self, max_queue: int = 256, max_notifications: int = 50) -> None:
		self._queues: Set[asyncio.Queue] = set()
		self._max_queue = max_queue
		# Most recent notifications only, for clients that attach late.
		self.notifications: Deque[Notification] = deque(maxlen=max_notifications)

	@property
	def subscriber_count(self) -> int:
		return len(self._queues)

	def subscribe(self) -> asyncio.Queue:
		queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue)
		self._queues.add(queue)
		return queue

	def unsubscribe(self, queue: asyncio.Queue) -> None:
		self._queues.discard(queue)

	def publish(self, event: Dict[str, Any]) -> None:
		for queue in list(self._queues):
			try:
				queue.put_nowait(event)
			except asyncio.QueueFull:
				LOGGER.warning("Dropping %s event for a slow subscriber", event.get("type"))

	def message_appended(self, message: Message) -> None:
		self.publish({"type": MESSAGE_APPENDED, "message": message.to_dict()})

	def message_replaced(self, message_id: int, message: Message) -> None:
		self.publish({"type": MESSAGE_REPLACED, "replaced_id": message_id, "message": message.to_dict()})

	def notify(self, notification: Notification) -> None:
		self.notifications.append(notification)
		self.publish({"type": NOTIFICATION, **notification.to_dict()})

	def state_changed(self, state: SessionState) -> None:
		self.publish({"type": SESSION_STATE, "state": state.to_dict()})
