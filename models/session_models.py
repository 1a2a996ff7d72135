"""Session domain models for the municipal conversation engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Language(str, Enum):
	"""Languages the assistant can answer in."""

	ENGLISH = "english"
	HINDI = "hindi"

	def toggled(self) -> "Language":
		return Language.HINDI if self is Language.ENGLISH else Language.ENGLISH


class Sender(str, Enum):
	USER = "user"
	BOT = "bot"


class MessageStatus(str, Enum):
	PENDING = "pending"
	SUCCESS = "success"
	ERROR = "error"


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ImageAttachment:
	"""An image the user attached to the next turn.

	Attributes:
		image_b64: Base64-encoded image bytes sent to the waste classifier.
		media_type: Declared media type, e.g. image/jpeg.
		filename: Client-side filename, informational only.
		size_bytes: Size of the decoded upload.
		preview_b64: Optional base64 PNG thumbnail for rendering.
	"""

	image_b64: bytes
	media_type: str
	filename: str = "upload"
	size_bytes: int = 0
	preview_b64: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		return {
			"kind": "image",
			"media_type": self.media_type,
			"filename": self.filename,
			"preview_b64": self.preview_b64,
		}


@dataclass(frozen=True)
class Message:
	"""A single conversation turn. Only pending placeholders are ever replaced."""

	id: int
	text: str
	sender: Sender
	timestamp: datetime = field(default_factory=_utcnow)
	status: Optional[MessageStatus] = None
	attachment: Optional[ImageAttachment] = None

	def with_id(self, message_id: int) -> "Message":
		return replace(self, id=message_id)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"text": self.text,
			"sender": self.sender.value,
			"timestamp": self.timestamp.isoformat(),
			"status": self.status.value if self.status else None,
			"attachment": self.attachment.to_dict() if self.attachment else None,
		}


@dataclass(frozen=True)
class Notification:
	"""Transient UI feedback, rendered as a toast by subscribers."""

	title: str
	description: str
	variant: str = "default"

	def to_dict(self) -> Dict[str, Any]:
		return {"title": self.title, "description": self.description, "variant": self.variant}


@dataclass
class SessionState:
	"""Mutable per-session flags owned by the conversation controller."""

	session_id: str
	user_id: Optional[str] = None
	language: Language = Language.ENGLISH
	pending_attachment: Optional[ImageAttachment] = None
	is_typing: bool = False
	is_generating_response: bool = False
	closed: bool = False

	def to_dict(self) -> Dict[str, Any]:
		return {
			"session_id": self.session_id,
			"language": self.language.value,
			"has_attachment": self.pending_attachment is not None,
			"is_typing": self.is_typing,
			"is_generating_response": self.is_generating_response,
			"closed": self.closed,
		}
