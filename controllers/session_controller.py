"""Session lifecycle and turn helpers for the conversation API."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, UploadFile

from models.session_models import Language
from services.conversation.controller import ConversationController
from services.conversation.session_registry import ConversationRegistry
from utils.media_validation import read_image_upload


def _registry(request: Request) -> ConversationRegistry:
	registry = getattr(request.app.state, "conversations", None)
	if registry is None:
		raise HTTPException(status_code=500, detail="Conversation registry not initialized.")
	return registry


def get_conversation(request: Request, session_id: str) -> ConversationController:
	"""Return the controller for `session_id` or raise a 404."""
	try:
		return _registry(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


def _snapshot(controller: ConversationController) -> Dict[str, Any]:
	return {
		"session_id": controller.state.session_id,
		"state": controller.state.to_dict(),
		"messages": [msg.to_dict() for msg in controller.messages()],
		"notifications": [note.to_dict() for note in controller.events.notifications],
	}


async def start_session(request: Request, user_id: Optional[str], language: Optional[str] = None) -> Dict[str, Any]:
	"""Create a new conversation seeded with the greeting."""
	try:
		initial = Language(language) if language else Language.ENGLISH
	except ValueError as exc:
		raise HTTPException(status_code=422, detail=f"Unsupported language: {language}") from exc
	controller = _registry(request).create(user_id=user_id, language=initial)
	return _snapshot(controller)


async def get_messages(request: Request, session_id: str) -> Dict[str, Any]:
	return _snapshot(get_conversation(request, session_id))


async def submit_message(request: Request, session_id: str, text: str) -> Dict[str, Any]:
	"""Submit a user turn; delayed replies arrive over the websocket or a later poll."""
	controller = get_conversation(request, session_id)
	appended = controller.submit(text)
	return {
		"session_id": session_id,
		"accepted": bool(appended),
		"appended": [msg.to_dict() for msg in appended],
		"state": controller.state.to_dict(),
	}


async def switch_language(request: Request, session_id: str) -> Dict[str, Any]:
	controller = get_conversation(request, session_id)
	message = controller.switch_language()
	return {"session_id": session_id, "language": controller.language.value, "message": message.to_dict()}


async def attach_image(request: Request, session_id: str, image: UploadFile, draft_text: str = "") -> Dict[str, Any]:
	"""Attach an uploaded image to the next turn.

	Validation failures are reported in the body, not as HTTP errors, so the
	client can show the warning it also receives as a notification.
	"""
	controller = get_conversation(request, session_id)
	data, media_type, filename = await read_image_upload(image, controller.max_image_bytes)
	outcome = controller.attach_image(data, media_type, filename=filename, draft_text=draft_text)
	return {
		"session_id": session_id,
		"accepted": outcome.accepted,
		"prompt": outcome.prompt,
		"reason": outcome.reason,
		"notification": outcome.notification.to_dict() if outcome.notification else None,
	}


async def clear_attachment(request: Request, session_id: str) -> Dict[str, Any]:
	controller = get_conversation(request, session_id)
	return {"session_id": session_id, "cleared": controller.clear_attachment()}


async def file_complaint(
	request: Request, session_id: str, issue_type: str, location: str, description: str
) -> Dict[str, Any]:
	"""Submit the quick complaint form as a turn."""
	if not issue_type.strip() or not location.strip():
		raise HTTPException(status_code=400, detail="Complaint type and location are required.")
	controller = get_conversation(request, session_id)
	appended = controller.file_complaint(issue_type, location, description)
	return {"session_id": session_id, "appended": [msg.to_dict() for msg in appended]}


async def complaint_letter(request: Request, session_id: str, issue: str, location: str) -> Dict[str, Any]:
	controller = get_conversation(request, session_id)
	return {
		"session_id": session_id,
		"language": controller.language.value,
		"letter": controller.complaint_letter(issue, location),
	}


async def end_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Close a session and cancel its pending replies."""
	try:
		await _registry(request).close(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "closed": True}
