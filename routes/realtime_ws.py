"""WebSocket endpoint streaming conversation events and accepting commands."""

from __future__ import annotations

import asyncio
import contextlib
import json

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.conversation.session_registry import ConversationRegistry
from services.conversation.ws_session import ConversationSocketHandler

router = APIRouter()


def _require_registry(websocket: WebSocket) -> ConversationRegistry:
	registry = getattr(websocket.app.state, "conversations", None)
	if registry is None:
		raise HTTPException(status_code=500, detail="Conversation registry unavailable")
	return registry


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
	while True:
		event = await queue.get()
		await websocket.send_text(json.dumps(event, ensure_ascii=False))


@router.websocket("/ws/{session_id}")
async def conversation_socket(
	websocket: WebSocket, session_id: str, registry: ConversationRegistry = Depends(_require_registry)
):
	"""Push every conversation event for one session and accept its commands."""
	await websocket.accept()
	try:
		controller = registry.get(session_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session not found"}))
		await websocket.close()
		return

	handler = ConversationSocketHandler(controller)
	queue = controller.events.subscribe()
	forwarder = asyncio.create_task(_forward_events(websocket, queue))
	try:
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			except Exception:
				await websocket.send_text(json.dumps({"type": "error", "detail": "Invalid websocket frame"}))
				continue
			try:
				payload = json.loads(raw)
			except Exception:
				await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be JSON"}))
				continue
			if not isinstance(payload, dict):
				await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be a JSON object"}))
				continue
			await handler.handle(websocket, payload)
	finally:
		controller.events.unsubscribe(queue)
		forwarder.cancel()
		with contextlib.suppress(Exception, asyncio.CancelledError):
			await forwarder
		# Leaving the page ends the conversation.
		await registry.release(session_id)
	try:
		await websocket.close()
	except Exception:
		pass
