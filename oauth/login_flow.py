"""OAuth login flow orchestration

Sequences one login attempt: PKCE parameters, authorization URL, browser,
callback listener, token exchange and persistence. Every failure propagates
to the caller unchanged; nothing is retried.
"""

import functools
import logging
from typing import Awaitable, Callable, Optional, Protocol

from .authorization import AuthorizationFlow, create_authorization_flow, open_in_browser
from .callback_server import OAuthCallbackServer
from .constants import (
    DEFAULT_CALLBACK_TIMEOUT,
    OAUTH_CALLBACK_HOST,
    OAUTH_CALLBACK_PORT,
    REDIRECT_URI,
)
from .token_exchange import exchange_code_for_token

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Persistence for the access token"""

    def load(self) -> Optional[str]: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


TokenExchanger = Callable[[str, str], Awaitable[str]]
BrowserOpener = Callable[[str], bool]
ServerFactory = Callable[..., OAuthCallbackServer]


class LoginFlow:
    """Browser-based OAuth login with PKCE

    Args:
        token_store: Receives the access token on success
        exchange: Coroutine exchanging (code, verifier) for an access token
        open_browser: Launches the authorization URL, returning False on failure
        server_factory: Builds the callback listener for an expected state
        timeout: Seconds to wait for the redirect
        on_browser_failure: Called with the URL when no browser could be opened
        on_waiting: Called with the URL once the listener is up and the browser launched
    """

    def __init__(
        self,
        token_store: TokenStore,
        exchange: Optional[TokenExchanger] = None,
        open_browser: BrowserOpener = open_in_browser,
        server_factory: ServerFactory = OAuthCallbackServer,
        timeout: float = DEFAULT_CALLBACK_TIMEOUT,
        host: str = OAUTH_CALLBACK_HOST,
        port: int = OAUTH_CALLBACK_PORT,
        redirect_uri: str = REDIRECT_URI,
        on_browser_failure: Optional[Callable[[str], None]] = None,
        on_waiting: Optional[Callable[[str], None]] = None,
    ):
        self.token_store = token_store
        self.exchange = exchange or functools.partial(exchange_code_for_token, redirect_uri=redirect_uri)
        self.open_browser = open_browser
        self.server_factory = server_factory
        self.timeout = timeout
        self.host = host
        self.port = port
        self.redirect_uri = redirect_uri
        self.on_browser_failure = on_browser_failure
        self.on_waiting = on_waiting

    def _launch_browser(self, flow: AuthorizationFlow) -> None:
        try:
            opened = self.open_browser(flow.url)
        except Exception as e:
            # The user can still paste the URL; the listener stays up
            logger.warning(f"Browser launch failed: {e}")
            opened = False

        if opened:
            logger.debug("Browser opened for authorization")
        elif self.on_browser_failure is not None:
            self.on_browser_failure(flow.url)

        if self.on_waiting is not None:
            self.on_waiting(flow.url)

    async def run(self) -> None:
        """Run one login attempt

        Raises:
            CallbackError: Rejected redirect, timeout or listener failure
            TokenExchangeError: The code could not be exchanged
        """
        flow = create_authorization_flow(self.redirect_uri)
        logger.debug(f"Generated authorization URL: {flow.url[:60]}...")

        server = self.server_factory(
            flow.state, host=self.host, port=self.port, timeout=self.timeout
        )
        # Listen before the browser can redirect back
        await server.start()
        try:
            self._launch_browser(flow)
            result = await server.wait_for_callback()
        finally:
            await server.stop()

        logger.info("Authorization code received, exchanging for token")
        token = await self.exchange(result.code, flow.pkce.verifier)
        self.token_store.save(token)
        logger.info("Login complete, token stored")
