"""Dispatch conversation websocket commands to the session controller."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import WebSocket

from services.conversation.controller import ConversationController
from utils.media_validation import AttachmentRejected, decode_base64_payload


class ConversationSocketHandler:
	"""Route websocket commands for a single conversation session."""

	def __init__(self, controller: ConversationController) -> None:
		self.controller = controller

	async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		try:
			if message_type == "message.submit":
				result = self._submit(payload)
			elif message_type == "language.switch":
				message = self.controller.switch_language()
				result = {"type": "language.switched", "language": self.controller.language.value, "message": message.to_dict()}
			elif message_type == "attachment.add":
				result = self._attach(payload)
			elif message_type == "attachment.clear":
				result = {"type": "attachment.cleared", "cleared": self.controller.clear_attachment()}
			else:
				raise ValueError("Unsupported message type.")
			if result is not None:
				result["request_id"] = request_id
				await self._send(websocket, result)
		except Exception as exc:
			await self._send_error(websocket, request_id, str(exc))

	def _submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		text = payload.get("text") or ""
		appended = self.controller.submit(text)
		return {"type": "message.ack", "appended": [msg.to_dict() for msg in appended]}

	def _attach(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		image_b64 = (payload.get("image_b64") or "").strip()
		if not image_b64:
			raise ValueError("Image payload is required.")
		try:
			data = decode_base64_payload(image_b64)
		except AttachmentRejected as exc:
			outcome = self.controller.reject_attachment(exc)
		else:
			outcome = self.controller.attach_image(
				data,
				payload.get("media_type"),
				filename=payload.get("filename") or "upload",
				draft_text=payload.get("draft_text") or "",
			)
		return {
			"type": "attachment.result",
			"accepted": outcome.accepted,
			"prompt": outcome.prompt,
			"reason": outcome.reason,
		}

	async def _send_error(self, websocket: WebSocket, request_id: Optional[Any], detail: str) -> None:
		await self._send(websocket, {"type": "error", "request_id": request_id, "detail": detail})

	async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		await websocket.send_text(json.dumps(payload, ensure_ascii=False))
