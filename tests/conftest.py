from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
	sys.path.insert(0, str(SRC_ROOT))


class FakeClock:
	def __init__(self, start: float = 1_000_000.0):
		self.now = start

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


class FakeTransport:
	"""Records every call and answers from per-path canned responses."""

	def __init__(self):
		self.calls: list[tuple[str, dict]] = []
		self._responses: dict[str, tuple[dict, str]] = {}
		self.closed = False

	def respond(self, path: str, data: dict | None = None, error: str = "no_error") -> None:
		self._responses[path] = (dict(data or {}), error)

	def fail(self, path: str) -> None:
		self._responses[path] = ({}, "connection_error")

	def call(self, path: str, fields: dict):
		self.calls.append((path, dict(fields)))
		data, error = self._responses.get(path, ({}, "connection_error"))
		return dict(data), error

	def count(self, path: str) -> int:
		return sum(1 for p, _ in self.calls if p == path)

	def close(self) -> None:
		self.closed = True


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def transport():
	return FakeTransport()


@pytest.fixture
def make_client(clock, transport):
	from codeauth.client import create_client

	created = []

	def _build(use_cache: bool = True, cache_duration: float = 30, **kwargs):
		client = create_client(
			"api.example.test",
			"proj-1",
			use_cache,
			cache_duration,
			transport=kwargs.pop("transport", transport),
			clock=kwargs.pop("clock", clock),
			**kwargs,
		)
		created.append(client)
		return client

	yield _build
	for client in created:
		client.close()
