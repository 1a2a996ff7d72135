"""Simple in-memory registry of live conversation sessions."""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional
from uuid import uuid4

from models.session_models import Language, SessionState
from services.conversation.controller import ConversationController
from services.conversation.persistence import TurnSink
from services.conversation.scheduler import ConversationTimings
from services.waste.analysis_adapter import WasteAnalysisAdapter

LOGGER = logging.getLogger(__name__)


class ConversationRegistry:
	"""Create, look up, and tear down conversation sessions."""

	def __init__(
		self,
		adapter: WasteAnalysisAdapter,
		persistence: Optional[TurnSink] = None,
		timings: ConversationTimings = ConversationTimings(),
	) -> None:
		self.adapter = adapter
		self.persistence = persistence
		self.timings = timings
		self._sessions: Dict[str, ConversationController] = {}

	def create(self, user_id: Optional[str] = None, language: Language = Language.ENGLISH) -> ConversationController:
		"""Start a session seeded with the greeting in `language`."""
		session_id = uuid4().hex
		state = SessionState(session_id=session_id, user_id=user_id or None, language=language)
		controller = ConversationController(
			state,
			adapter=self.adapter,
			persistence=self.persistence,
			timings=self.timings,
		)
		self._sessions[session_id] = controller
		LOGGER.info("Started session %s (identified=%s)", session_id, bool(user_id))
		return controller

	def get(self, session_id: str) -> ConversationController:
		"""Return a session or raise KeyError if missing."""
		controller = self._sessions.get(session_id)
		if controller is None:
			raise KeyError(f"Session {session_id} not found")
		return controller

	async def close(self, session_id: str) -> ConversationController:
		"""Close a session, cancelling its pending callbacks, and forget it."""
		controller = self.get(session_id)
		del self._sessions[session_id]
		await controller.close()
		LOGGER.info("Closed session %s", session_id)
		return controller

	async def close_all(self) -> None:
		for session_id in list(self._sessions):
			await self.close(session_id)

	async def release(self, session_id: str) -> bool:
		"""Close a session once its last live subscriber has gone; returns whether it was closed."""
		controller = self._sessions.get(session_id)
		if controller is None or controller.events.subscriber_count:
			return False
		await self.close(session_id)
		return True

	async def sweep_idle(self, max_idle: float, *, now: Optional[float] = None) -> int:
		"""Close sessions with no subscriber and no activity for `max_idle` seconds."""
		now = time.monotonic() if now is None else now
		stale = [
			session_id
			for session_id, controller in self._sessions.items()
			if not controller.events.subscriber_count and now - controller.last_activity >= max_idle
		]
		for session_id in stale:
			if session_id in self._sessions:
				await self.close(session_id)
		if stale:
			LOGGER.info("Closed %d idle session(s)", len(stale))
		return len(stale)

	def __len__(self) -> int:
		return len(self._sessions)
