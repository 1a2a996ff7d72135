"""Top-level orchestration of one assistant conversation."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from models.session_models import (
	ImageAttachment,
	Language,
	Message,
	MessageStatus,
	Notification,
	Sender,
	SessionState,
)
from models.waste_models import WasteClassification
from services.conversation.events import ConversationEvents
from services.conversation.intents import LANGUAGE_SWITCH_INTENTS, Intent, IntentClassifier
from services.conversation.message_store import MessageStore
from services.conversation.persistence import TurnSink
from services.conversation.response_generator import BotReply, ReplyParams, ResponseGenerator
from services.conversation.scheduler import ConversationTimings, DelayedEventScheduler
from services.thumbnail_generator import ThumbnailGenerator
from services.waste.analysis_adapter import WasteAnalysisAdapter
from utils.media_validation import (
	MAX_IMAGE_BYTES,
	REASON_ALREADY_ATTACHED,
	AttachmentRejected,
	validate_image,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachResult:
	"""Outcome of an attach attempt.

	`prompt` is the text the input box should hold afterwards: the caller's
	draft, or the default "identify this waste" prompt when the draft is empty.
	"""

	accepted: bool
	prompt: Optional[str] = None
	notification: Optional[Notification] = None
	reason: Optional[str] = None


@dataclass
class _PendingAnalysis:
	placeholder_id: int
	task: Optional[asyncio.Task]
	language: Language


def _bot(text: str, status: Optional[MessageStatus] = None) -> Message:
	return Message(id=0, text=text, sender=Sender.BOT, status=status)


class ConversationController:
	"""Own a session's state and route every user action through the engine.

	All mutations of the message log go through this class: it is the single
	writer, and it only ever appends messages or replaces a pending analysis
	placeholder. Delayed replies run on the session's scheduler and are
	cancelled when the session closes.
	"""

	def __init__(
		self,
		state: SessionState,
		*,
		adapter: WasteAnalysisAdapter,
		persistence: Optional[TurnSink] = None,
		timings: ConversationTimings = ConversationTimings(),
		store: Optional[MessageStore] = None,
		intents: Optional[IntentClassifier] = None,
		responses: Optional[ResponseGenerator] = None,
		scheduler: Optional[DelayedEventScheduler] = None,
		events: Optional[ConversationEvents] = None,
		thumbnails: Optional[ThumbnailGenerator] = None,
		max_image_bytes: int = MAX_IMAGE_BYTES,
	) -> None:
		self.state = state
		self.adapter = adapter
		self.persistence = persistence
		self.timings = timings
		self.store = store or MessageStore()
		self.intents = intents or IntentClassifier()
		self.responses = responses or ResponseGenerator()
		self.scheduler = scheduler or DelayedEventScheduler(label=state.session_id)
		self.events = events or ConversationEvents()
		self.thumbnails = thumbnails or ThumbnailGenerator()
		self.max_image_bytes = max_image_bytes

		self._in_flight = 0
		self._analysis: Optional[_PendingAnalysis] = None
		self.last_activity = time.monotonic()

		self.store.subscribe(self.events.message_appended, self.events.message_replaced)
		self.store.append(_bot(self.responses.greeting(state.language)))

	@property
	def language(self) -> Language:
		return self.state.language

	def messages(self) -> Tuple[Message, ...]:
		return self.store.snapshot()

	# ---------------------- user actions ---------------------- #

	def submit(self, text: str, *, record_text: Optional[str] = None) -> List[Message]:
		"""Handle one user turn and return the messages appended right away.

		Replies that arrive later (thinking delay, analysis, follow-ups) are
		published on the event channel. `record_text` overrides the user text
		kept in the persistence store.
		"""
		self._ensure_open()
		text = text or ""
		attachment = self.state.pending_attachment
		if not text.strip() and attachment is None:
			return []

		language = self.state.language
		intent = self.intents.classify(text, language, has_attachment=attachment is not None)
		LOGGER.debug("Session %s classified turn as %s", self.state.session_id, intent.value)

		appended = [self.store.append(Message(id=0, text=text, sender=Sender.USER, attachment=attachment))]
		self.state.pending_attachment = None
		self._begin_response()
		stored_text = record_text or text

		if intent in LANGUAGE_SWITCH_INTENTS:
			target = Language.HINDI if intent is Intent.SWITCH_TO_HINDI else Language.ENGLISH
			self.state.language = target
			reply = self.responses.render(intent, target)
			self.scheduler.schedule(
				self.timings.response_delay, lambda: self._deliver(reply, target, stored_text)
			)
		elif intent is Intent.WASTE_ANALYSIS:
			appended.append(self._start_analysis(attachment, text, language, stored_text))
		else:
			self.scheduler.schedule(
				self.timings.response_delay, lambda: self._respond(intent, text, language, stored_text)
			)
		return appended

	def switch_language(self) -> Message:
		"""Toggle the session language and announce it immediately."""
		self._ensure_open()
		target = self.state.language.toggled()
		self.state.language = target
		message = self.store.append(_bot(self.responses.language_switched(target)))
		self.events.notify(self.responses.notification("language_changed", target))
		self.events.state_changed(self.state)
		return message

	def attach_image(
		self,
		data: bytes,
		media_type: Optional[str],
		filename: str = "upload",
		draft_text: str = "",
	) -> AttachResult:
		"""Validate and hold an image for the next turn.

		Rejections leave the session unchanged and emit a single warning
		notification; nothing is appended to the message log.
		"""
		self._ensure_open()
		language = self.state.language
		try:
			if self.state.pending_attachment is not None:
				raise AttachmentRejected(REASON_ALREADY_ATTACHED, "An image is already attached.")
			normalized = validate_image(data, media_type, self.max_image_bytes)
		except AttachmentRejected as exc:
			return self.reject_attachment(exc)

		self.state.pending_attachment = ImageAttachment(
			image_b64=base64.b64encode(data),
			media_type=normalized,
			filename=filename or "upload",
			size_bytes=len(data),
			preview_b64=self._preview(data),
		)
		note = self.responses.notification("image_attached", language)
		self.events.notify(note)
		self.events.state_changed(self.state)
		prompt = draft_text if draft_text.strip() else self.responses.attach_prompt(language)
		return AttachResult(accepted=True, prompt=prompt, notification=note)

	def reject_attachment(self, exc: AttachmentRejected) -> AttachResult:
		"""Report an attachment that failed before or during validation."""
		LOGGER.info("Rejected attachment for session %s: %s", self.state.session_id, exc.detail)
		note = self.responses.notification(exc.reason, self.state.language)
		self.events.notify(note)
		return AttachResult(accepted=False, notification=note, reason=exc.reason)

	def clear_attachment(self) -> bool:
		"""Drop the pending attachment; returns whether there was one."""
		self.touch()
		had_attachment = self.state.pending_attachment is not None
		self.state.pending_attachment = None
		if had_attachment:
			self.events.state_changed(self.state)
		return had_attachment

	def file_complaint(self, issue_type: str, location: str, description: str = "") -> List[Message]:
		"""Submit the quick complaint form as a regular turn."""
		language = self.state.language
		sentence = self.responses.complaint_sentence(issue_type, location, description, language)
		issue = f"{issue_type.strip()} {description.strip()}".strip()
		summary = self.responses.complaint_summary(issue, location, language)
		return self.submit(sentence, record_text=summary)

	def complaint_letter(self, issue: str, location: str) -> str:
		return self.responses.complaint_letter(issue, location, self.state.language)

	async def close(self) -> None:
		"""Tear the session down, discarding every pending callback."""
		if self.state.closed:
			return
		self.state.closed = True
		self._analysis = None
		await self.scheduler.aclose()
		self.events.state_changed(self.state)

	async def wait_idle(self) -> None:
		await self.scheduler.wait_idle()

	# ---------------------- replies ---------------------- #

	def _respond(self, intent: Intent, text: str, language: Language, stored_text: str) -> None:
		reply = self.responses.render(intent, language, ReplyParams(text=text))
		self._deliver(reply, language, stored_text)

	def _deliver(self, reply: BotReply, language: Language, stored_text: str) -> None:
		self.store.append(_bot(reply.text, reply.status))
		for extra in reply.extra:
			self.store.append(_bot(extra))
		if reply.notification is not None:
			self.events.notify(reply.notification)
		complaint = reply.status_update_for
		if complaint is not None:
			self.scheduler.schedule(
				self.timings.status_update_delay,
				lambda: self.store.append(
					_bot(self.responses.render_status_update(complaint, language), MessageStatus.SUCCESS)
				),
			)
		self._end_response()
		self._persist(stored_text, reply.text)

	# ---------------------- waste analysis ---------------------- #

	def _start_analysis(
		self, attachment: ImageAttachment, text: str, language: Language, stored_text: str
	) -> Message:
		self._supersede_analysis()
		placeholder = self.store.append(_bot(self.responses.placeholder(language), MessageStatus.PENDING))
		pending = _PendingAnalysis(placeholder_id=placeholder.id, task=None, language=language)
		self._analysis = pending
		pending.task = self.scheduler.spawn(
			self._run_analysis(pending, attachment, text, language, stored_text)
		)
		return placeholder

	async def _run_analysis(
		self,
		pending: _PendingAnalysis,
		attachment: ImageAttachment,
		text: str,
		language: Language,
		stored_text: str,
	) -> None:
		try:
			classification = await self.adapter.classify(attachment, text_hint=text)
			reply = self.responses.render(
				Intent.WASTE_ANALYSIS, language, ReplyParams(text=text, classification=classification)
			)
		except asyncio.CancelledError:
			raise
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.warning("Waste analysis failed for session %s: %s", self.state.session_id, exc)
			failed = self.responses.analysis_failed(language)
			if self._resolve_analysis(pending, _bot(failed, MessageStatus.ERROR)):
				self.events.notify(self.responses.notification("waste_analysis_failed", language))
				self._persist(stored_text, failed)
			return

		if not self._resolve_analysis(pending, _bot(reply.text, MessageStatus.SUCCESS)):
			return
		self.events.notify(self.responses.notification("waste_analysis_complete", language))
		self._persist(stored_text, reply.text)
		self._schedule_reward(classification, language)

	def _schedule_reward(self, classification: WasteClassification, language: Language) -> None:
		if not classification.is_identified:
			return

		def reward() -> None:
			text, note = self.responses.reward(language)
			self.store.append(_bot(text, MessageStatus.SUCCESS))
			self.events.notify(note)

		self.scheduler.schedule(self.timings.reward_delay, reward)

	def _resolve_analysis(self, pending: _PendingAnalysis, terminal: Message) -> bool:
		"""Replace `pending`'s placeholder if it is still the current analysis."""
		if self._analysis is not pending:
			return False
		self._analysis = None
		self.store.replace(pending.placeholder_id, terminal)
		self._end_response()
		return True

	def _supersede_analysis(self) -> None:
		pending = self._analysis
		if pending is None:
			return
		LOGGER.info("Superseding waste analysis %s in session %s", pending.placeholder_id, self.state.session_id)
		if pending.task is not None:
			pending.task.cancel()
		self._resolve_analysis(pending, _bot(self.responses.analysis_superseded(pending.language), MessageStatus.ERROR))

	# ---------------------- helpers ---------------------- #

	def _persist(self, user_text: str, bot_text: str) -> None:
		if self.persistence is None or not self.state.user_id:
			return
		self.scheduler.spawn(self.persistence.save_turn(self.state.user_id, user_text, bot_text))

	def _preview(self, data: bytes) -> Optional[str]:
		try:
			return self.thumbnails.create_thumbnail(data)
		except ValueError as exc:
			LOGGER.info("No preview for attachment in session %s: %s", self.state.session_id, exc)
			return None

	def _begin_response(self) -> None:
		self._in_flight += 1
		self._sync_flags()

	def _end_response(self) -> None:
		self._in_flight = max(self._in_flight - 1, 0)
		self._sync_flags()

	def _sync_flags(self) -> None:
		busy = self._in_flight > 0
		self.state.is_typing = busy
		self.state.is_generating_response = busy
		self.events.state_changed(self.state)

	def touch(self) -> None:
		self.last_activity = time.monotonic()

	def _ensure_open(self) -> None:
		if self.state.closed:
			raise RuntimeError("Session is closed; start a new session.")
		self.touch()
