from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from codeauth.client import CodeAuthClient, create_client
from codeauth.transport import Transport


@dataclass
class CodeAuthConfig:
	endpoint: str
	project_id: str
	use_cache: bool = True
	cache_duration_s: float = 30.0
	request_timeout_s: float = 10.0
	background_sweep: bool = False


def _to_bool(value: str | None, default: bool) -> bool:
	if value is None:
		return default
	v = str(value).strip().lower()
	if v in {"1", "true", "yes", "y", "on"}:
		return True
	if v in {"0", "false", "no", "n", "off"}:
		return False
	return default


def _to_positive_float(value: str | None, default: float) -> float:
	if value is None or not str(value).strip():
		return default
	try:
		out = float(value)
	except ValueError:
		return default
	if out <= 0:
		return default
	return out


def _normalize_endpoint(raw: str) -> str:
	endpoint = raw.strip()
	for prefix in ("https://", "http://"):
		if endpoint.lower().startswith(prefix):
			endpoint = endpoint[len(prefix):]
			break
	return endpoint.rstrip("/")


def read_kv_config(path: str | Path) -> dict[str, str]:
	"""Parse `KEY = value` lines. Blank lines and `#` comments are skipped."""
	raw = Path(path).read_text(encoding="utf-8")
	out: dict[str, str] = {}
	for line in raw.splitlines():
		s = line.strip()
		if not s or s.startswith("#"):
			continue
		if "=" not in s:
			raise ValueError(f"Invalid config line: '{line}'")
		k, v = s.split("=", 1)
		out[k.strip()] = v.strip()
	return out


def load_codeauth_config(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> CodeAuthConfig:
	"""
	Read settings from an optional key/value file, then let environment
	variables override them. CODEAUTH_ENDPOINT and CODEAUTH_PROJECT_ID are required.
	"""
	conf: dict[str, str] = read_kv_config(path) if path is not None else {}
	env_vars = os.environ if env is None else env

	def pick(key: str) -> str | None:
		val = env_vars.get(key)
		if val is not None and val.strip():
			return val
		return conf.get(key)

	endpoint = _normalize_endpoint(pick("CODEAUTH_ENDPOINT") or "")
	project_id = (pick("CODEAUTH_PROJECT_ID") or "").strip()
	if not endpoint or not project_id:
		raise RuntimeError("CodeAuth config is missing required fields: CODEAUTH_ENDPOINT, CODEAUTH_PROJECT_ID.")

	return CodeAuthConfig(
		endpoint=endpoint,
		project_id=project_id,
		use_cache=_to_bool(pick("CODEAUTH_USE_CACHE"), True),
		cache_duration_s=_to_positive_float(pick("CODEAUTH_CACHE_DURATION"), 30.0),
		request_timeout_s=_to_positive_float(pick("CODEAUTH_REQUEST_TIMEOUT_SECONDS"), 10.0),
		background_sweep=_to_bool(pick("CODEAUTH_BACKGROUND_SWEEP"), False),
	)


def create_client_from_config(
	config: CodeAuthConfig,
	*,
	transport: Transport | None = None,
	clock: Callable[[], float] | None = None,
) -> CodeAuthClient:
	return create_client(
		config.endpoint,
		config.project_id,
		config.use_cache,
		config.cache_duration_s,
		request_timeout_s=config.request_timeout_s,
		background_sweep=config.background_sweep,
		transport=transport,
		clock=clock,
	)
