"""
Local OAuth callback server

Listens on the loopback redirect URI for exactly one authorization redirect.
The first terminal event (valid callback, rejected callback, timeout or
listener fault) settles a single future; everything after it is ignored and
the listener is torn down on every exit path.
"""
import asyncio
import hmac
import html
import logging
from enum import Enum
from typing import Optional

from aiohttp import web

from .constants import (
    DEFAULT_CALLBACK_TIMEOUT,
    OAUTH_CALLBACK_HOST,
    OAUTH_CALLBACK_PATH,
    OAUTH_CALLBACK_PORT,
)
from .exceptions import (
    CallbackError,
    CallbackTimeoutError,
    ListenerError,
    MissingParametersError,
    ProviderError,
    StateMismatchError,
)

logger = logging.getLogger(__name__)

# Browser keep-alive connections must not hold up teardown
SHUTDOWN_TIMEOUT = 1.0

_PAGE_STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            display: flex;
            justify-content: center;
            align-items: center;
            height: 100vh;
            margin: 0;
            background: #f5f5f5;
        }
        .container {
            text-align: center;
            padding: 2rem;
            background: white;
            border-radius: 8px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
        }
        .mark { font-size: 3rem; }
        .ok { color: #4caf50; }
        .failed { color: #f44336; }
        h1 { color: #333; margin: 1rem 0; }
        p { color: #666; }
"""

SUCCESS_HTML = f"""<!DOCTYPE html>
<html>
<head>
    <title>td - Authenticated</title>
    <style>{_PAGE_STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="mark ok">&#10003;</div>
        <h1>Successfully authenticated!</h1>
        <p>You can close this window and return to the terminal.</p>
    </div>
</body>
</html>
"""

_ERROR_HTML_TEMPLATE = f"""<!DOCTYPE html>
<html>
<head>
    <title>td - Error</title>
    <style>{_PAGE_STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="mark failed">&#10007;</div>
        <h1>Authentication failed</h1>
        <p>{{message}}</p>
    </div>
</body>
</html>
"""


def error_html(message: str) -> str:
    """Render the failure page; the message may come from query parameters"""
    return _ERROR_HTML_TEMPLATE.replace("{message}", html.escape(message))


class ListenerState(str, Enum):
    """Lifecycle of a callback listener"""
    IDLE = "idle"
    LISTENING = "listening"
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    CLOSED = "closed"


class CallbackResult:
    """OAuth callback result"""

    def __init__(self, code: str, state: str):
        self.code = code
        self.state = state

    def __repr__(self) -> str:
        return "CallbackResult(code=<redacted>, state=<redacted>)"


class OAuthCallbackServer:
    """Single-shot local HTTP server for the OAuth redirect"""

    def __init__(
        self,
        expected_state: str,
        host: str = OAUTH_CALLBACK_HOST,
        port: int = OAUTH_CALLBACK_PORT,
        path: str = OAUTH_CALLBACK_PATH,
        timeout: float = DEFAULT_CALLBACK_TIMEOUT,
    ):
        self.expected_state = expected_state
        self.host = host
        self.port = port
        self.path = path
        self.timeout = timeout
        self.status = ListenerState.IDLE
        self.terminal_state: Optional[ListenerState] = None
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._outcome: Optional[asyncio.Future] = None

        # Register callback route; anything else falls through to aiohttp's 404
        self.app.router.add_get(path, self._handle_callback)

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"

    @property
    def is_listening(self) -> bool:
        return self.runner is not None

    def _settle(self, state: ListenerState, result: Optional[CallbackResult] = None,
                error: Optional[CallbackError] = None) -> bool:
        """Resolve the outcome once; later calls are no-ops

        Returns:
            True if this call decided the outcome
        """
        if self._outcome is None or self._outcome.done():
            return False
        if error is not None:
            self._outcome.set_exception(error)
        else:
            self._outcome.set_result(result)
        self.terminal_state = state
        logger.debug(f"OAuth callback listener reached state {state.value}")
        return True

    @staticmethod
    def _page(body: str, status: int) -> web.Response:
        response = web.Response(text=body, content_type="text/html", status=status)
        response.force_close()
        return response

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        if self._outcome is None or self._outcome.done():
            logger.warning("Ignoring OAuth callback: this login attempt has already completed")
            return self._page(error_html("This login attempt has already completed."), 400)

        try:
            code = request.query.get("code")
            state = request.query.get("state")
            error = request.query.get("error")
            error_description = request.query.get("error_description")

            if error:
                logger.warning(f"OAuth provider returned error: {error}")
                self._settle(ListenerState.REJECTED, error=ProviderError(error, error_description))
                return self._page(error_html(f"OAuth error: {error}"), 400)

            if not code or not state:
                self._settle(
                    ListenerState.REJECTED,
                    error=MissingParametersError("Missing code or state parameter"),
                )
                return self._page(error_html("Missing code or state parameter"), 400)

            # Exact, constant-time comparison of the raw bytes
            if not hmac.compare_digest(state.encode("utf-8"), self.expected_state.encode("utf-8")):
                logger.warning("OAuth state mismatch - possible CSRF attempt")
                self._settle(
                    ListenerState.REJECTED,
                    error=StateMismatchError("Invalid state parameter (possible CSRF attack)"),
                )
                return self._page(error_html("Invalid state parameter (possible CSRF attack)"), 400)

            self._settle(ListenerState.SUCCEEDED, result=CallbackResult(code=code, state=state))
            return self._page(SUCCESS_HTML, 200)

        except Exception as e:
            logger.exception("Error in OAuth callback handler")
            failure = ListenerError(f"Callback handler failed: {e}")
            failure.__cause__ = e
            self._settle(ListenerState.ERRORED, error=failure)
            return self._page(error_html("Internal error while handling the callback."), 500)

    async def start(self) -> None:
        """Bind the loopback endpoint and begin listening

        Raises:
            ListenerError: If the port cannot be bound
        """
        if self.status is not ListenerState.IDLE:
            raise RuntimeError("Callback server can only be started once")

        self._outcome = asyncio.get_running_loop().create_future()
        self.runner = web.AppRunner(self.app, shutdown_timeout=SHUTDOWN_TIMEOUT)
        try:
            await self.runner.setup()
            site = web.TCPSite(self.runner, host=self.host, port=self.port)
            await site.start()
        except OSError as e:
            self.status = ListenerState.ERRORED
            self.terminal_state = ListenerState.ERRORED
            await self.stop()
            raise ListenerError(
                f"Could not listen on {self.host}:{self.port}: {e}"
            ) from e

        # Port 0 asks the OS for a free port; record the real one
        addresses = self.runner.addresses
        if self.port == 0 and addresses:
            self.port = addresses[0][1]

        self.status = ListenerState.LISTENING
        logger.info(f"OAuth callback server listening on {self.redirect_uri}")

    async def wait_for_callback(self, timeout: Optional[float] = None) -> CallbackResult:
        """
        Wait for the OAuth redirect and shut the listener down.

        Args:
            timeout: Seconds to wait (defaults to the server's timeout)

        Returns:
            CallbackResult carrying the authorization code

        Raises:
            CallbackError: Rejected redirect, timeout or listener failure
            RuntimeError: The server was never started or is already stopped
        """
        if self._outcome is None:
            raise RuntimeError("Callback server is not started")
        if self._outcome.cancelled():
            raise RuntimeError("Callback server is stopped")

        timeout = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(asyncio.shield(self._outcome), timeout=timeout)
        except asyncio.TimeoutError:
            # A callback may have landed in the same loop iteration; it wins
            self._settle(ListenerState.TIMED_OUT, error=CallbackTimeoutError(timeout))
            logger.info(f"OAuth callback outcome after {timeout:g}s: {self.terminal_state.value}")
            return self._outcome.result()
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop the callback server (safe to call more than once)"""
        if self.runner is not None:
            runner, self.runner = self.runner, None
            await runner.cleanup()
            logger.debug("OAuth callback server stopped")

        if self._outcome is not None:
            if not self._outcome.done():
                self._outcome.cancel()
            elif not self._outcome.cancelled():
                # Mark a stored exception as retrieved
                self._outcome.exception()

        if self.status is not ListenerState.IDLE:
            self.status = ListenerState.CLOSED

    async def __aenter__(self) -> "OAuthCallbackServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


async def start_callback_server(
    expected_state: str,
    host: str = OAUTH_CALLBACK_HOST,
    port: int = OAUTH_CALLBACK_PORT,
    timeout: float = DEFAULT_CALLBACK_TIMEOUT,
) -> OAuthCallbackServer:
    """
    Start OAuth callback server.

    Args:
        expected_state: Expected state parameter for CSRF protection

    Returns:
        OAuthCallbackServer instance, already listening
    """
    server = OAuthCallbackServer(expected_state, host=host, port=port, timeout=timeout)
    await server.start()
    return server


async def listen_for_callback(
    expected_state: str,
    timeout: float = DEFAULT_CALLBACK_TIMEOUT,
    host: str = OAUTH_CALLBACK_HOST,
    port: int = OAUTH_CALLBACK_PORT,
) -> CallbackResult:
    """Start a listener, wait for one redirect and release the port"""
    server = await start_callback_server(expected_state, host=host, port=port, timeout=timeout)
    return await server.wait_for_callback()
