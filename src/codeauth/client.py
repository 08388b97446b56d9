from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from codeauth.errors import (
	AlreadyInitializedError,
	BAD_SESSION_TOKEN,
	NO_ERROR,
	NotInitializedError,
	OUT_OF_REFRESH,
)
from codeauth.results import (
	SessionInfoResult,
	SessionInvalidateResult,
	SessionRefreshResult,
	SignInEmailResult,
	SignInEmailVerifyResult,
	SignInSocialResult,
	SignInSocialVerifyResult,
)
from codeauth.session_cache import SessionCache, SessionRecord, mask_token
from codeauth.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)

INVALIDATE_ONLY_THIS = "only_this"
INVALIDATE_ALL = "all"
INVALIDATE_ALL_BUT_THIS = "all_but_this"

# Old tokens that refresh reports as unusable are dropped from the cache too.
_REFRESH_EVICT_ERRORS = {BAD_SESSION_TOKEN, OUT_OF_REFRESH}


def _record_from(data: dict[str, Any]) -> SessionRecord:
	return SessionRecord(
		email=data.get("email"),
		expiration=data.get("expiration"),
		refresh_left=data.get("refresh_left"),
	)


class CodeAuthClient:
	"""
	Handle for one CodeAuth project.

	Build it with `create_client`, which initializes it exactly once. Calling
	any operation before initialization or after `close()` raises
	NotInitializedError; initializing twice raises AlreadyInitializedError.

	Every operation returns a result whose `error` is "no_error" on success,
	the server's code verbatim on a business error, or "connection_error"
	when the service could not be reached.
	"""

	def __init__(
		self,
		project_endpoint: str,
		project_id: str,
		*,
		use_cache: bool = True,
		cache_duration: float = 30,
		request_timeout_s: float = 10.0,
		background_sweep: bool = False,
		transport: Transport | None = None,
		clock: Callable[[], float] | None = None,
	):
		self.endpoint = project_endpoint
		self.project_id = project_id
		self._use_cache = bool(use_cache)
		self._cache_duration = cache_duration
		self._background_sweep = bool(background_sweep)
		self._transport = transport or HttpTransport(project_endpoint, timeout_s=request_timeout_s)
		self.cache = SessionCache(clock=clock)
		self._state_lock = threading.Lock()
		self._initialized = False
		self._closed = False

	# ---- lifecycle ----
	def initialize(self) -> None:
		with self._state_lock:
			if self._closed:
				raise NotInitializedError("CodeAuth client has been closed and cannot be initialized again.")
			if self._initialized:
				raise AlreadyInitializedError("CodeAuth has already been initialized.")
			self._initialized = True
		self.cache.configure(self._use_cache, self._cache_duration)
		if self._use_cache and self._background_sweep:
			self.cache.start_sweeper()
		logger.info(
			"CodeAuth client initialized endpoint=%s project=%s cache=%s window=%ss",
			self.endpoint,
			self.project_id,
			self._use_cache,
			self.cache.window_duration,
		)

	@property
	def initialized(self) -> bool:
		return self._initialized and not self._closed

	def close(self) -> None:
		with self._state_lock:
			if self._closed:
				return
			self._closed = True
		self.cache.stop_sweeper()
		self.cache.clear()
		close = getattr(self._transport, "close", None)
		if callable(close):
			close()
		logger.info("CodeAuth client closed endpoint=%s project=%s", self.endpoint, self.project_id)

	def __enter__(self) -> "CodeAuthClient":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()

	def _ensure_initialized(self) -> None:
		if not self._initialized:
			raise NotInitializedError("CodeAuth has not been initialized.")
		if self._closed:
			raise NotInitializedError("CodeAuth client has been closed.")

	def _call(self, path: str, **fields: Any) -> tuple[dict[str, Any], str]:
		payload = {"project_id": self.project_id, **fields}
		logger.debug("CodeAuth call %s", path)
		return self._transport.call(path, payload)

	# ---- sign in ----
	def sign_in_email(self, email: str) -> SignInEmailResult:
		"""Start the email flow: the service mails a one time code to `email`."""
		self._ensure_initialized()
		_, error = self._call("/signin/email", email=email)
		return SignInEmailResult(error=error)

	def sign_in_email_verify(self, email: str, code: str) -> SignInEmailVerifyResult:
		"""Exchange the emailed one time code for a session token."""
		self._ensure_initialized()
		data, error = self._call("/signin/emailverify", email=email, code=code)
		if error != NO_ERROR:
			return SignInEmailVerifyResult(error=error)

		token = data.get("session_token")
		if token:
			self.cache.put(token, _record_from(data))
		return SignInEmailVerifyResult(
			error=NO_ERROR,
			session_token=token,
			email=data.get("email"),
			expiration=data.get("expiration"),
			refresh_left=data.get("refresh_left"),
		)

	def sign_in_social(self, social_type: str) -> SignInSocialResult:
		"""Get the OAuth2 sign-in url for `social_type` ("google", "microsoft", "apple")."""
		self._ensure_initialized()
		data, error = self._call("/signin/social", social_type=social_type)
		if error != NO_ERROR:
			return SignInSocialResult(error=error)
		return SignInSocialResult(error=NO_ERROR, signin_url=data.get("signin_url"))

	def sign_in_social_verify(self, social_type: str, authorization_code: str) -> SignInSocialVerifyResult:
		"""Exchange the authorization code handed back by the social provider for a session token."""
		self._ensure_initialized()
		data, error = self._call(
			"/signin/socialverify",
			social_type=social_type,
			authorization_code=authorization_code,
		)
		if error != NO_ERROR:
			return SignInSocialVerifyResult(error=error)

		token = data.get("session_token")
		if token:
			self.cache.put(token, _record_from(data))
		return SignInSocialVerifyResult(
			error=NO_ERROR,
			session_token=token,
			email=data.get("email"),
			expiration=data.get("expiration"),
			refresh_left=data.get("refresh_left"),
		)

	# ---- sessions ----
	def session_info(self, session_token: str) -> SessionInfoResult:
		self._ensure_initialized()
		cached = self.cache.get(session_token)
		if cached is not None:
			logger.debug("Session cache hit token=%s", mask_token(session_token))
			return SessionInfoResult(
				error=NO_ERROR,
				email=cached.email,
				expiration=cached.expiration,
				refresh_left=cached.refresh_left,
				cached=True,
			)

		data, error = self._call("/session/info", session_token=session_token)
		if error != NO_ERROR:
			return SessionInfoResult(error=error)

		record = _record_from(data)
		self.cache.put(session_token, record)
		return SessionInfoResult(
			error=NO_ERROR,
			email=record.email,
			expiration=record.expiration,
			refresh_left=record.refresh_left,
		)

	def session_refresh(self, session_token: str) -> SessionRefreshResult:
		"""Trade `session_token` for a new one; the old token stops being cached."""
		self._ensure_initialized()
		data, error = self._call("/session/refresh", session_token=session_token)
		if error != NO_ERROR:
			if error in _REFRESH_EVICT_ERRORS:
				self.cache.remove(session_token)
			return SessionRefreshResult(error=error)

		new_token = data.get("session_token")
		self.cache.remove(session_token)
		if new_token:
			self.cache.put(new_token, _record_from(data))
		logger.debug("Session refreshed token=%s -> %s", mask_token(session_token), mask_token(new_token))
		return SessionRefreshResult(
			error=NO_ERROR,
			session_token=new_token,
			email=data.get("email"),
			expiration=data.get("expiration"),
			refresh_left=data.get("refresh_left"),
		)

	def session_invalidate(self, session_token: str, invalidate_type: str = INVALIDATE_ONLY_THIS) -> SessionInvalidateResult:
		"""
		Invalidate sessions through `session_token`.

		invalidate_type is "only_this", "all" or "all_but_this". The token's own
		cache entry is dropped whatever the outcome; on success, "all" and
		"all_but_this" also drop the other cached sessions of the same email,
		or the whole cache when the token's email is not known locally.
		"""
		self._ensure_initialized()
		known = self.cache.peek(session_token)
		_, error = self._call(
			"/session/invalidate",
			session_token=session_token,
			invalidate_type=invalidate_type,
		)
		self.cache.remove(session_token)

		if error == NO_ERROR and invalidate_type in (INVALIDATE_ALL, INVALIDATE_ALL_BUT_THIS):
			if known is None:
				logger.debug("Invalidated %s for uncached token=%s; clearing cache.", invalidate_type, mask_token(session_token))
				self.cache.clear()
			elif invalidate_type == INVALIDATE_ALL:
				self.cache.remove_email(known.email)
			else:
				self.cache.remove_email(known.email, keep=session_token)
		return SessionInvalidateResult(error=error)


def create_client(
	project_endpoint: str,
	project_id: str,
	use_cache: bool = True,
	cache_duration: float = 30,
	*,
	request_timeout_s: float = 10.0,
	background_sweep: bool = False,
	transport: Transport | None = None,
	clock: Callable[[], float] | None = None,
) -> CodeAuthClient:
	"""
	Build and initialize a client.

	use_cache caches session data from the verify, info and refresh calls and
	drops it on refresh and invalidate. cache_duration is the cache window in
	seconds; at least 15 seconds is needed to mitigate most rate limits.
	"""
	client = CodeAuthClient(
		project_endpoint,
		project_id,
		use_cache=use_cache,
		cache_duration=cache_duration,
		request_timeout_s=request_timeout_s,
		background_sweep=background_sweep,
		transport=transport,
		clock=clock,
	)
	client.initialize()
	return client
