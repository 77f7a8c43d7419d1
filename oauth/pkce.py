"""PKCE (Proof Key for Code Exchange) generation"""

import base64
import hashlib
import secrets
import string
from typing import NamedTuple

# RFC 7636 unreserved characters
VERIFIER_CHARSET = string.ascii_letters + string.digits + "-._~"
VERIFIER_LENGTH = 64
STATE_BYTES = 16


class PKCEPair(NamedTuple):
    """PKCE code verifier and challenge pair"""
    verifier: str
    challenge: str


def generate_code_verifier() -> str:
    """Generate a PKCE code verifier

    Characters are drawn one at a time with ``secrets.choice`` so every
    character of the unreserved set is equally likely.

    Returns:
        64-character verifier from [A-Za-z0-9-._~]
    """
    return "".join(secrets.choice(VERIFIER_CHARSET) for _ in range(VERIFIER_LENGTH))


def generate_code_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier

    Args:
        verifier: PKCE code verifier

    Returns:
        base64url-encoded SHA-256 digest of the verifier, without padding
    """
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_state() -> str:
    """Generate the anti-CSRF state parameter

    Returns:
        32 hex characters (128 bits of entropy)
    """
    return secrets.token_hex(STATE_BYTES)


def generate_pkce() -> PKCEPair:
    """Generate a fresh verifier together with its challenge"""
    verifier = generate_code_verifier()
    return PKCEPair(verifier=verifier, challenge=generate_code_challenge(verifier))
