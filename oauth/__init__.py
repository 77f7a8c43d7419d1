"""
Todoist OAuth authentication module
"""
from .constants import (
    CLIENT_ID,
    AUTHORIZE_URL,
    TOKEN_URL,
    REDIRECT_URI,
    SCOPE,
    OAUTH_CALLBACK_HOST,
    OAUTH_CALLBACK_PORT,
    OAUTH_CALLBACK_PATH,
    DEFAULT_CALLBACK_TIMEOUT,
)
from .pkce import (
    PKCEPair,
    generate_code_verifier,
    generate_code_challenge,
    generate_state,
    generate_pkce,
)
from .authorization import (
    AuthorizationFlow,
    build_authorization_url,
    create_authorization_flow,
    open_in_browser,
)
from .callback_server import (
    CallbackResult,
    ListenerState,
    OAuthCallbackServer,
    start_callback_server,
    listen_for_callback,
)
from .exceptions import (
    OAuthError,
    CallbackError,
    StateMismatchError,
    ProviderError,
    MissingParametersError,
    CallbackTimeoutError,
    ListenerError,
    TokenExchangeError,
)
from .token_exchange import exchange_code_for_token
from .login_flow import LoginFlow, TokenStore
from .validators import is_personal_token_format, validate_token_format

__all__ = [
    # Constants
    "CLIENT_ID",
    "AUTHORIZE_URL",
    "TOKEN_URL",
    "REDIRECT_URI",
    "SCOPE",
    "OAUTH_CALLBACK_HOST",
    "OAUTH_CALLBACK_PORT",
    "OAUTH_CALLBACK_PATH",
    "DEFAULT_CALLBACK_TIMEOUT",
    # PKCE
    "PKCEPair",
    "generate_code_verifier",
    "generate_code_challenge",
    "generate_state",
    "generate_pkce",
    # Authorization
    "AuthorizationFlow",
    "build_authorization_url",
    "create_authorization_flow",
    "open_in_browser",
    # Callback Server
    "CallbackResult",
    "ListenerState",
    "OAuthCallbackServer",
    "start_callback_server",
    "listen_for_callback",
    # Errors
    "OAuthError",
    "CallbackError",
    "StateMismatchError",
    "ProviderError",
    "MissingParametersError",
    "CallbackTimeoutError",
    "ListenerError",
    "TokenExchangeError",
    # Token Exchange
    "exchange_code_for_token",
    # Login Flow
    "LoginFlow",
    "TokenStore",
    # Validators
    "is_personal_token_format",
    "validate_token_format",
]
