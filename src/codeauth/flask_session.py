from __future__ import annotations

import functools
from typing import Any, Callable

import flask

from codeauth.client import CodeAuthClient
from codeauth.errors import BAD_SESSION_TOKEN, RATE_LIMIT_REACHED

_STATUS_BY_ERROR = {
	BAD_SESSION_TOKEN: 401,
	RATE_LIMIT_REACHED: 429,
}


def get_request_session_token(token_name: str = "session") -> str | None:
	token = (flask.request.cookies.get(token_name) or "").strip()
	if token:
		return token
	auth = (flask.request.headers.get("Authorization") or "").strip()
	scheme, _, value = auth.partition(" ")
	if scheme.lower() == "bearer" and value.strip():
		return value.strip()
	return None


def session_required(client: CodeAuthClient, token_name: str = "session") -> Callable:
	"""
	View decorator that resolves the request's session token through
	`client.session_info` and exposes the result as `flask.g.codeauth_session`.
	"""
	def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
		@functools.wraps(view)
		def wrapped(*args, **kwargs):
			token = get_request_session_token(token_name)
			if not token:
				return flask.jsonify({"ok": False, "message": "Authentication required."}), 401

			info = client.session_info(token)
			if not info.ok:
				status = _STATUS_BY_ERROR.get(info.error, 503)
				return flask.jsonify({"ok": False, "error": info.error}), status

			flask.g.codeauth_session = info
			flask.g.codeauth_session_token = token
			return view(*args, **kwargs)

		return wrapped

	return decorator
