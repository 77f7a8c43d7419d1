"""
Todoist OAuth authorization URL construction
"""
import logging
import webbrowser
from typing import NamedTuple
from urllib.parse import urlencode

from .constants import (
    AUTHORIZE_URL,
    CLIENT_ID,
    CODE_CHALLENGE_METHOD,
    REDIRECT_URI,
    SCOPE,
)
from .pkce import PKCEPair, generate_pkce, generate_state

logger = logging.getLogger(__name__)


class AuthorizationFlow(NamedTuple):
    """OAuth authorization flow data"""
    pkce: PKCEPair
    state: str
    url: str


def build_authorization_url(
    code_challenge: str,
    state: str,
    redirect_uri: str = REDIRECT_URI,
) -> str:
    """
    Build the Todoist authorization URL.

    Args:
        code_challenge: PKCE S256 challenge
        state: Anti-CSRF state parameter
        redirect_uri: Local callback URI registered for the client

    Returns:
        Full authorization URL
    """
    params = {
        "client_id": CLIENT_ID,
        "scope": SCOPE,
        "state": state,
        "redirect_uri": redirect_uri,
        "code_challenge": code_challenge,
        "code_challenge_method": CODE_CHALLENGE_METHOD,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def create_authorization_flow(redirect_uri: str = REDIRECT_URI) -> AuthorizationFlow:
    """
    Create a Todoist OAuth authorization flow.

    Generates a PKCE pair, an independent state value and the authorization URL.

    Returns:
        AuthorizationFlow: Tuple of (pkce, state, url)
    """
    pkce = generate_pkce()
    state = generate_state()
    url = build_authorization_url(pkce.challenge, state, redirect_uri)
    return AuthorizationFlow(pkce=pkce, state=state, url=url)


def open_in_browser(url: str) -> bool:
    """Open the authorization URL in the default browser

    Returns:
        True if a browser was launched, False otherwise
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning(f"Could not launch a browser: {e}")
        return False
    if not opened:
        logger.warning("No runnable browser found")
    return bool(opened)
