"""Render bot replies from intents, languages, and dynamic parameters."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from models.session_models import Language, MessageStatus, Notification
from models.waste_models import WasteClassification
from services.conversation.intents import (
	COMPLAINT_INTENTS,
	LANGUAGE_SWITCH_INTENTS,
	Intent,
	match_category,
	match_keyword,
	normalize,
)
from services.conversation.templates import ECO_POINTS_PER_ANALYSIS, TEMPLATE_INTENTS, pack_for

TRACKING_ID_LIMIT = 10_000

_LOCATION_PATTERN = re.compile(r"\b(?:at|near|in)\s+(.+?)[\s.!?]*$", re.IGNORECASE)


@dataclass(frozen=True)
class ReplyParams:
	"""Dynamic inputs a reply may need."""

	text: str = ""
	issue: Optional[str] = None
	location: Optional[str] = None
	classification: Optional[WasteClassification] = None


@dataclass(frozen=True)
class BotReply:
	"""Rendered reply plus the side effects the controller should carry out.

	Attributes:
		text: Primary bot message.
		status: Status stamped on the message, if any.
		tracking_id: Tracking number appended to complaint acknowledgments.
		status_update_for: Complaint intent that needs a delayed field-team update.
		notification: Ephemeral notification to emit with the reply.
		extra: Further bot messages appended right after the primary one.
	"""

	text: str
	status: Optional[MessageStatus] = None
	tracking_id: Optional[int] = None
	status_update_for: Optional[Intent] = None
	notification: Optional[Notification] = None
	extra: Tuple[str, ...] = ()


def extract_location(text: str) -> Optional[str]:
	"""Return the phrase after a trailing 'at'/'near'/'in', e.g. 'near Gandhi Chowk'."""
	match = _LOCATION_PATTERN.search((text or "").strip())
	if not match:
		return None
	return match.group(1).strip() or None


class ResponseGenerator:
	"""Fill the language packs' templates for the conversation controller."""

	def __init__(self, rng: Optional[random.Random] = None) -> None:
		self._rng = rng or random.Random()

	def tracking_id(self) -> int:
		"""Return a cosmetic tracking number in [0, 10000); uniqueness is not guaranteed."""
		return self._rng.randrange(TRACKING_ID_LIMIT)

	def render(self, intent: Intent, language: Language, params: Optional[ReplyParams] = None) -> BotReply:
		params = params or ReplyParams()
		pack = pack_for(language)

		if intent in LANGUAGE_SWITCH_INTENTS:
			target = Language.HINDI if intent is Intent.SWITCH_TO_HINDI else Language.ENGLISH
			return BotReply(text=pack_for(target).welcome)

		if intent is Intent.WASTE_ANALYSIS:
			if params.classification is None:
				raise ValueError("A classification is required to render a waste analysis reply.")
			return BotReply(text=self.render_analysis(params.classification, language), status=MessageStatus.SUCCESS)

		if intent is Intent.PHOTO_ISSUE:
			tracking = self.tracking_id()
			extra: Tuple[str, ...] = ()
			if params.text.strip() and not self._names_known_issue(params.text, language):
				issue = params.issue or params.text.strip()
				location = params.location or extract_location(params.text) or pack.default_location
				extra = (f"{pack.letter_intro}\n\n{self.complaint_letter(issue, location, language)}",)
			return BotReply(
				text=f"{pack.photo_ack}{tracking}",
				tracking_id=tracking,
				notification=self.notification("image_analysis_complete", language),
				extra=extra,
			)

		if intent in COMPLAINT_INTENTS:
			tracking = self.tracking_id()
			return BotReply(
				text=f"{pack.replies[intent]}{tracking}",
				tracking_id=tracking,
				status_update_for=intent,
			)

		if intent in TEMPLATE_INTENTS:
			return BotReply(text=pack.replies[intent])

		return BotReply(text=pack.replies[Intent.UNKNOWN])

	@staticmethod
	def _names_known_issue(text: str, language: Language) -> bool:
		normalized = normalize(text)
		return match_category(normalized) is not None or match_keyword(normalized, language) is not None

	def render_status_update(self, intent: Intent, language: Language) -> str:
		pack = pack_for(language)
		return pack.status_update.format(category=pack.complaint_labels[intent])

	def render_analysis(self, classification: WasteClassification, language: Language) -> str:
		pack = pack_for(language)
		if not classification.is_identified:
			return pack.analysis_unknown.format(confidence=classification.confidence_percent)
		return pack.analysis_result.format(
			detected=classification.detected_issue,
			waste_type=pack.waste_labels[classification.waste_type],
			bin=pack.bin_labels[classification.bin_type],
			confidence=classification.confidence_percent,
		)

	def placeholder(self, language: Language) -> str:
		return pack_for(language).analyzing

	def analysis_failed(self, language: Language) -> str:
		return pack_for(language).analysis_failed

	def analysis_superseded(self, language: Language) -> str:
		return pack_for(language).analysis_superseded

	def reward(self, language: Language, points: int = ECO_POINTS_PER_ANALYSIS) -> Tuple[str, Notification]:
		pack = pack_for(language)
		return pack.reward.format(points=points), self.notification("eco_points", language, points=points)

	def greeting(self, language: Language) -> str:
		return pack_for(language).greeting

	def language_switched(self, language: Language) -> str:
		"""Announcement for the explicit language toggle."""
		return pack_for(language).switched

	def attach_prompt(self, language: Language) -> str:
		return pack_for(language).attach_prompt

	def complaint_letter(self, issue: str, location: str, language: Language) -> str:
		return pack_for(language).complaint_letter.format(issue=issue.strip(), location=location.strip())

	def complaint_summary(self, issue: str, location: str, language: Language) -> str:
		return pack_for(language).complaint_summary.format(issue=issue.strip(), loc=location.strip())

	def complaint_sentence(self, issue_type: str, location: str, description: str, language: Language) -> str:
		return pack_for(language).complaint_sentence.format(
			type=issue_type.strip(), location=location.strip(), description=description.strip()
		).strip()

	def notification(self, key: str, language: Language, **values: object) -> Notification:
		template = pack_for(language).notifications[key]
		return Notification(
			title=template.title,
			description=template.description.format(**values) if values else template.description,
			variant=template.variant,
		)
