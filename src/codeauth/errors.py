from __future__ import annotations

NO_ERROR = "no_error"
CONNECTION_ERROR = "connection_error"

BAD_JSON = "bad_json"
PROJECT_NOT_FOUND = "project_not_found"
BAD_IP_ADDRESS = "bad_ip_address"
RATE_LIMIT_REACHED = "rate_limit_reached"
BAD_EMAIL = "bad_email"
BAD_CODE = "bad_code"
BAD_SOCIAL_TYPE = "bad_social_type"
BAD_SESSION_TOKEN = "bad_session_token"
BAD_INVALIDATE_TYPE = "bad_invalidate_type"
CODE_REQUEST_INTERVAL_REACHED = "code_request_interval_reached"
CODE_HOURLY_LIMIT_REACHED = "code_hourly_limit_reached"
EMAIL_PROVIDER_ERROR = "email_provider_error"
OUT_OF_REFRESH = "out_of_refresh"
INTERNAL_ERROR = "internal_error"

# Codes the service documents. Anything else it sends is still passed through.
SERVER_ERROR_CODES = frozenset({
	BAD_JSON,
	PROJECT_NOT_FOUND,
	BAD_IP_ADDRESS,
	RATE_LIMIT_REACHED,
	BAD_EMAIL,
	BAD_CODE,
	BAD_SOCIAL_TYPE,
	BAD_SESSION_TOKEN,
	BAD_INVALIDATE_TYPE,
	CODE_REQUEST_INTERVAL_REACHED,
	CODE_HOURLY_LIMIT_REACHED,
	EMAIL_PROVIDER_ERROR,
	OUT_OF_REFRESH,
	INTERNAL_ERROR,
})


class CodeAuthError(RuntimeError):
	"""Misuse of the SDK. Raised, never returned as a result code."""


class NotInitializedError(CodeAuthError):
	pass


class AlreadyInitializedError(CodeAuthError):
	pass
