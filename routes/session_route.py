"""FastAPI routes for assistant conversations."""

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.session_controller import (
	attach_image,
	clear_attachment,
	complaint_letter,
	end_session,
	file_complaint,
	get_messages,
	start_session,
	submit_message,
	switch_language,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class StartPayload(BaseModel):
	user_id: Optional[str] = None
	language: Optional[str] = None


class MessagePayload(BaseModel):
	text: str = ""


class ComplaintPayload(BaseModel):
	type: str
	location: str
	description: str = ""


class LetterPayload(BaseModel):
	issue: str
	location: str


@router.post("")
async def start_session_route(request: Request, payload: StartPayload):
	try:
		return await start_session(request, payload.user_id, payload.language)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/messages")
async def get_messages_route(request: Request, session_id: str):
	try:
		return await get_messages(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/messages")
async def post_message_route(request: Request, session_id: str, payload: MessagePayload):
	try:
		return await submit_message(request, session_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/language")
async def switch_language_route(request: Request, session_id: str):
	try:
		return await switch_language(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/attachment")
async def attach_image_route(
	request: Request,
	session_id: str,
	image: UploadFile = File(...),
	draft_text: str = Form(""),
):
	"""Attach an image to the next turn of the conversation."""
	try:
		return await attach_image(request, session_id, image, draft_text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}/attachment")
async def clear_attachment_route(request: Request, session_id: str):
	try:
		return await clear_attachment(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/complaint")
async def file_complaint_route(request: Request, session_id: str, payload: ComplaintPayload):
	try:
		return await file_complaint(request, session_id, payload.type, payload.location, payload.description)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/complaint-letter")
async def complaint_letter_route(request: Request, session_id: str, payload: LetterPayload):
	try:
		return await complaint_letter(request, session_id, payload.issue, payload.location)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def end_session_route(request: Request, session_id: str):
	try:
		return await end_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
