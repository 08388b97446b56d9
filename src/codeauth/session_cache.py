from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

MIN_WINDOW_SECONDS = 5.0
RECOMMENDED_WINDOW_SECONDS = 15.0


def mask_token(token: str | None) -> str:
	if not token:
		return "<empty>"
	return f"{token[:6]}..." if len(token) > 6 else "***"


@dataclass(frozen=True)
class SessionRecord:
	email: Any
	expiration: Any
	refresh_left: Any


class SessionCache:
	"""
	Token -> SessionRecord map governed by a single shared time window.

	Every entry belongs to the current window. Once the window has elapsed the
	whole map is dropped before the next read or write and a new window starts,
	so the first lookup after expiry is always a miss.
	"""

	def __init__(self, clock: Callable[[], float] | None = None):
		self._clock = clock or time.time
		self._lock = threading.RLock()
		self._data: dict[str, SessionRecord] = {}
		self._enabled = False
		self._configured = False
		self._window_s = RECOMMENDED_WINDOW_SECONDS
		self._window_start = self._clock()
		self._sweeper: threading.Thread | None = None
		self._sweeper_stop = threading.Event()

	@property
	def enabled(self) -> bool:
		return self._enabled

	@property
	def window_duration(self) -> float:
		return self._window_s

	@property
	def window_start(self) -> float:
		return self._window_start

	def configure(self, enabled: bool, window_duration: float) -> None:
		try:
			window = float(window_duration)
		except (TypeError, ValueError):
			logger.warning("Invalid cache duration %r, using %ss.", window_duration, RECOMMENDED_WINDOW_SECONDS)
			window = RECOMMENDED_WINDOW_SECONDS
		if window < MIN_WINDOW_SECONDS:
			logger.warning("Cache duration %ss is below the minimum, clamped to %ss.", window, MIN_WINDOW_SECONDS)
			window = MIN_WINDOW_SECONDS
		elif window < RECOMMENDED_WINDOW_SECONDS:
			logger.warning(
				"Cache duration %ss is below the recommended %ss and may not mitigate rate limits.",
				window,
				RECOMMENDED_WINDOW_SECONDS,
			)

		with self._lock:
			if self._configured:
				logger.warning("Session cache reconfigured; dropping %d entries.", len(self._data))
			self._configured = True
			self._enabled = bool(enabled)
			self._window_s = window
			self._data.clear()
			self._window_start = self._clock()

	def _expire_locked(self) -> bool:
		now = self._clock()
		if now >= self._window_start + self._window_s:
			if self._data:
				logger.debug("Session cache window elapsed; dropping %d entries.", len(self._data))
			self._data.clear()
			self._window_start = now
			return True
		return False

	def get(self, token: str) -> SessionRecord | None:
		if not self._enabled:
			return None
		with self._lock:
			if self._expire_locked():
				return None
			return self._data.get(token)

	def peek(self, token: str) -> SessionRecord | None:
		"""Raw lookup that neither checks nor rolls the window."""
		if not self._enabled:
			return None
		with self._lock:
			return self._data.get(token)

	def put(self, token: str, record: SessionRecord) -> None:
		if not self._enabled or not token:
			return
		with self._lock:
			self._expire_locked()
			self._data[token] = record

	def remove(self, token: str) -> None:
		if not self._enabled:
			return
		with self._lock:
			self._expire_locked()
			self._data.pop(token, None)

	def remove_email(self, email: Any, keep: str | None = None) -> int:
		if not self._enabled or email is None:
			return 0
		with self._lock:
			self._expire_locked()
			doomed = [tok for tok, rec in self._data.items() if rec.email == email and tok != keep]
			for tok in doomed:
				del self._data[tok]
			return len(doomed)

	def clear(self) -> None:
		with self._lock:
			self._data.clear()
			self._window_start = self._clock()

	def __len__(self) -> int:
		with self._lock:
			return len(self._data)

	def __contains__(self, token: object) -> bool:
		with self._lock:
			return token in self._data

	# ---- background sweeper ----
	def start_sweeper(self) -> None:
		if not self._enabled:
			return
		with self._lock:
			if self._sweeper is not None and self._sweeper.is_alive():
				return
			self._sweeper_stop.clear()
			self._sweeper = threading.Thread(
				target=self._sweep_worker,
				name="codeauth-session-cache-sweeper",
				daemon=False,
			)
			self._sweeper.start()
		logger.info("Session cache sweeper started (every %ss).", self._window_s)

	def stop_sweeper(self, timeout: float | None = 5.0) -> None:
		with self._lock:
			thread = self._sweeper
			if thread is None:
				return
			self._sweeper_stop.set()
		# Joined outside the lock: the worker takes it in clear().
		thread.join(timeout)
		if thread.is_alive():
			logger.warning("Session cache sweeper did not stop within %ss.", timeout)
			return
		with self._lock:
			if self._sweeper is thread:
				self._sweeper = None
		logger.info("Session cache sweeper stopped.")

	@property
	def sweeper_running(self) -> bool:
		return self._sweeper is not None and self._sweeper.is_alive()

	def _sweep_worker(self) -> None:
		while not self._sweeper_stop.wait(self._window_s):
			self.clear()
