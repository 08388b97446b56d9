from codeauth.client import (
	CodeAuthClient,
	INVALIDATE_ALL,
	INVALIDATE_ALL_BUT_THIS,
	INVALIDATE_ONLY_THIS,
	create_client,
)
from codeauth.config import CodeAuthConfig, create_client_from_config, load_codeauth_config
from codeauth.errors import (
	AlreadyInitializedError,
	CONNECTION_ERROR,
	CodeAuthError,
	NO_ERROR,
	NotInitializedError,
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
from codeauth.session_cache import SessionCache, SessionRecord
from codeauth.transport import HttpTransport

__all__ = [
	"AlreadyInitializedError",
	"CONNECTION_ERROR",
	"CodeAuthClient",
	"CodeAuthConfig",
	"CodeAuthError",
	"HttpTransport",
	"INVALIDATE_ALL",
	"INVALIDATE_ALL_BUT_THIS",
	"INVALIDATE_ONLY_THIS",
	"NO_ERROR",
	"NotInitializedError",
	"SessionCache",
	"SessionInfoResult",
	"SessionInvalidateResult",
	"SessionRecord",
	"SessionRefreshResult",
	"SignInEmailResult",
	"SignInEmailVerifyResult",
	"SignInSocialResult",
	"SignInSocialVerifyResult",
	"create_client",
	"create_client_from_config",
	"load_codeauth_config",
]
