"""API token validation utilities"""

import re

MIN_TOKEN_LENGTH = 10

# Personal API tokens are 40 hex characters; OAuth tokens are opaque
_PERSONAL_TOKEN_RE = re.compile(r'^[0-9a-f]{40}$')


def is_personal_token_format(token: str) -> bool:
    """Check if a token looks like a Todoist personal API token

    Args:
        token: The token string to check

    Returns:
        True if token matches the 40-hex-character format, False otherwise
    """
    if not token:
        return False
    return _PERSONAL_TOKEN_RE.match(token.strip()) is not None


def validate_token_format(token: str) -> bool:
    """Validate that a token is usable as a bearer credential

    Args:
        token: The token string to validate

    Returns:
        True if token format is valid, False otherwise
    """
    if not token:
        return False
    token = token.strip()
    if len(token) < MIN_TOKEN_LENGTH:
        return False
    # Bearer credentials must not contain whitespace or control characters
    return re.match(r'^[\x21-\x7e]+$', token) is not None
