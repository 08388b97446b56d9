from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from codeauth.errors import CONNECTION_ERROR, NO_ERROR

logger = logging.getLogger(__name__)


class Transport(Protocol):
	def call(self, path: str, fields: dict[str, Any]) -> tuple[dict[str, Any], str]:
		"""
		POST `fields` to `path` and return (response fields, error code).
		The error code is "no_error", the server's own code, or "connection_error".
		"""
		...


class HttpTransport:
	def __init__(self, endpoint: str, *, timeout_s: float = 10.0, session: requests.Session | None = None):
		self.endpoint = endpoint
		self._timeout_s = float(timeout_s)
		self.session = session or requests.Session()

	def url_for(self, path: str) -> str:
		return f"https://{self.endpoint}{path}"

	def call(self, path: str, fields: dict[str, Any]) -> tuple[dict[str, Any], str]:
		try:
			resp = self.session.post(
				self.url_for(path),
				headers={
					"Accept": "application/json",
					"Content-Type": "application/json; charset=utf-8",
				},
				json=fields,
				timeout=self._timeout_s,
			)
		except requests.RequestException as e:
			logger.warning("CodeAuth request to %s failed: %s", path, type(e).__name__)
			return {}, CONNECTION_ERROR

		if resp.status_code not in (200, 400):
			logger.warning("CodeAuth request to %s returned unexpected status %s", path, resp.status_code)
			return {}, CONNECTION_ERROR

		try:
			data = resp.json()
		except ValueError:
			logger.warning("CodeAuth response from %s was not valid JSON (status %s)", path, resp.status_code)
			return {}, CONNECTION_ERROR
		if not isinstance(data, dict):
			logger.warning("CodeAuth response from %s was not a JSON object", path)
			return {}, CONNECTION_ERROR

		if resp.status_code == 200:
			return data, NO_ERROR

		code = data.get("error")
		if not isinstance(code, str) or not code:
			logger.warning("CodeAuth error response from %s carried no error code", path)
			return {}, CONNECTION_ERROR
		return data, code

	def close(self) -> None:
		self.session.close()
