"""OAuth token exchange for Todoist authentication"""

import logging
from typing import Optional

import httpx

from .constants import CLIENT_ID, REDIRECT_URI, TOKEN_URL
from .exceptions import TokenExchangeError

logger = logging.getLogger(__name__)


async def exchange_code_for_token(
    code: str,
    code_verifier: str,
    redirect_uri: str = REDIRECT_URI,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> str:
    """Exchange an authorization code for an access token

    The service checks the verifier against the challenge sent with the
    authorization request.

    Args:
        code: Authorization code from the callback
        code_verifier: PKCE code verifier generated for this login attempt
        redirect_uri: Redirect URI used in the authorization request
        client: Optional HTTP client (a short-lived one is created otherwise)
        timeout: Request timeout in seconds

    Returns:
        The access token

    Raises:
        TokenExchangeError: If the request fails or no token is returned
    """
    data = {
        "client_id": CLIENT_ID,
        "code": code,
        "code_verifier": code_verifier,
        "redirect_uri": redirect_uri,
    }

    logger.info(f"Exchanging authorization code for token at {TOKEN_URL}")

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=timeout)

    try:
        response = await client.post(
            TOKEN_URL,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.TimeoutException as e:
        raise TokenExchangeError(f"Token exchange timed out: {e}") from e
    except httpx.RequestError as e:
        raise TokenExchangeError(f"Token exchange request failed: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    logger.debug(f"Token exchange response status: {response.status_code}")

    if response.status_code != 200:
        raise TokenExchangeError(
            f"Token exchange failed: {response.status_code} {response.text}",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise TokenExchangeError(
            "Token exchange returned an invalid JSON body",
            status_code=response.status_code,
        ) from e

    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not access_token:
        raise TokenExchangeError(
            "Token exchange response did not include an access token",
            status_code=response.status_code,
        )

    logger.info("Access token obtained")
    return access_token
