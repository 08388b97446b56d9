from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from codeauth.errors import NO_ERROR


@dataclass(frozen=True)
class _Result:
	error: str

	@property
	def ok(self) -> bool:
		return self.error == NO_ERROR


@dataclass(frozen=True)
class SignInEmailResult(_Result):
	pass


@dataclass(frozen=True)
class SignInSocialResult(_Result):
	signin_url: str | None = None


@dataclass(frozen=True)
class _SessionTokenResult(_Result):
	"""Shape shared by both verify calls and refresh: a token plus its session data."""
	session_token: str | None = None
	email: Any = None
	expiration: Any = None
	refresh_left: Any = None


@dataclass(frozen=True)
class SignInEmailVerifyResult(_SessionTokenResult):
	pass


@dataclass(frozen=True)
class SignInSocialVerifyResult(_SessionTokenResult):
	pass


@dataclass(frozen=True)
class SessionRefreshResult(_SessionTokenResult):
	pass


@dataclass(frozen=True)
class SessionInfoResult(_Result):
	email: Any = None
	expiration: Any = None
	refresh_left: Any = None
	cached: bool = False


@dataclass(frozen=True)
class SessionInvalidateResult(_Result):
	pass
