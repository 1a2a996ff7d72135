"""Ordered, append/replace log of conversation turns."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from models.session_models import Message, MessageStatus

LOGGER = logging.getLogger(__name__)

AppendListener = Callable[[Message], None]
ReplaceListener = Callable[[int, Message], None]


class MessageStore:
	"""Own the message log of one session and the ids of its messages.

	Ids come from a single counter that is bumped on every append, so
	messages created by late-firing callbacks never reuse an id.
	"""

	def __init__(self) -> None:
		self._messages: List[Message] = []
		self._next_id = 1
		self._append_listeners: List[AppendListener] = []
		self._replace_listeners: List[ReplaceListener] = []

	def subscribe(self, on_append: Optional[AppendListener] = None, on_replace: Optional[ReplaceListener] = None) -> None:
		if on_append is not None:
			self._append_listeners.append(on_append)
		if on_replace is not None:
			self._replace_listeners.append(on_replace)

	def append(self, message: Message) -> Message:
		"""Store `message` under a fresh id and return the stored copy."""
		stored = message.with_id(self._next_id)
		self._next_id += 1
		self._messages.append(stored)
		for listener in self._append_listeners:
			listener(stored)
		return stored

	def replace(self, message_id: int, message: Message) -> Optional[Message]:
		"""Swap the message stored under `message_id`, keeping its id and position.

		Returns the stored message, or None when `message_id` is gone; a
		superseded placeholder is not an error.
		"""
		for index, current in enumerate(self._messages):
			if current.id != message_id:
				continue
			stored = message.with_id(message_id)
			self._messages[index] = stored
			for listener in self._replace_listeners:
				listener(message_id, stored)
			return stored
		LOGGER.debug("Message %s not found; replace skipped", message_id)
		return None

	def get(self, message_id: int) -> Optional[Message]:
		for message in self._messages:
			if message.id == message_id:
				return message
		return None

	def snapshot(self) -> Tuple[Message, ...]:
		return tuple(self._messages)

	def pending(self) -> Sequence[Message]:
		return [msg for msg in self._messages if msg.status is MessageStatus.PENDING]

	def __len__(self) -> int:
		return len(self._messages)
