"""Best-effort durable copy of conversation turns."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from dal.conversation_dal import ConversationDAL
from models.conversation_record import ConversationRecord

LOGGER = logging.getLogger(__name__)


class TurnSink(Protocol):
	async def save_turn(self, user_id: Optional[str], user_message: str, bot_response: str) -> Optional[int]:
		...


class ConversationPersistence:
	"""Append `{user_message, bot_response}` rows for identified users.

	Turns without a user identity are skipped. Storage failures are logged
	and swallowed so the in-memory conversation never depends on them.
	"""

	def __init__(self, dal: ConversationDAL) -> None:
		self.dal = dal

	async def save_turn(self, user_id: Optional[str], user_message: str, bot_response: str) -> Optional[int]:
		if not user_id:
			return None
		record = ConversationRecord(
			id=None,
			user_id=user_id,
			user_message=user_message,
			bot_response=bot_response,
		)
		try:
			return await self.dal.create_turn(record)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.error("Error saving conversation for user %s: %s", user_id, exc)
			return None
