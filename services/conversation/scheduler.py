"""Session-scoped scheduling of delayed conversation callbacks."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Set

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTimings:
	"""Fixed delays, in seconds, used to pace bot replies."""

	response_delay: float = 1.5
	status_update_delay: float = 8.0
	reward_delay: float = 3.0


class DelayedEventScheduler:
	"""Run callbacks after a delay, all bound to one conversation session.

	Closing the scheduler acts as the session's cancellation token: pending
	callbacks are cancelled and anything scheduled afterwards is dropped.
	"""

	def __init__(self, label: str = "") -> None:
		self.label = label
		self._tasks: Set[asyncio.Task] = set()
		self._closed = False

	@property
	def closed(self) -> bool:
		return self._closed

	@property
	def pending(self) -> int:
		return len(self._tasks)

	def schedule(self, delay: float, callback: Callable[[], Any]) -> Optional[asyncio.Task]:
		"""Invoke `callback` once `delay` seconds have elapsed.

		The callback may be a plain function or return an awaitable. Returns the
		backing task, or None when the session is already closed.
		"""
		return self.spawn(self._delayed(delay, callback))

	def spawn(self, coro: Awaitable[Any]) -> Optional[asyncio.Task]:
		"""Track a coroutine so it shares the session's lifetime."""
		if self._closed:
			if inspect.iscoroutine(coro):
				coro.close()
			LOGGER.info("Scheduler %s is closed; dropping task", self.label)
			return None
		task = asyncio.get_running_loop().create_task(self._guarded(coro))
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		return task

	async def _delayed(self, delay: float, callback: Callable[[], Any]) -> None:
		await asyncio.sleep(delay)
		if self._closed:
			return
		result = callback()
		if inspect.isawaitable(result):
			await result

	async def _guarded(self, coro: Awaitable[Any]) -> None:
		try:
			await coro
		except asyncio.CancelledError:
			raise
		except Exception:
			LOGGER.exception("Scheduled task failed in session %s", self.label)

	def cancel_all(self) -> int:
		"""Close the scheduler and cancel every pending task; returns the count."""
		self._closed = True
		tasks = list(self._tasks)
		for task in tasks:
			task.cancel()
		if tasks:
			LOGGER.info("Cancelled %d pending task(s) for session %s", len(tasks), self.label)
		return len(tasks)

	async def aclose(self) -> None:
		tasks = list(self._tasks)
		self.cancel_all()
		if tasks:
			await asyncio.gather(*tasks, return_exceptions=True)

	async def wait_idle(self) -> None:
		"""Wait until no task is pending, including tasks scheduled by other tasks."""
		while self._tasks:
			await asyncio.gather(*list(self._tasks), return_exceptions=True)
