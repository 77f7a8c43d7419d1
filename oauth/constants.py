"""
Todoist OAuth constants
"""

# OAuth Configuration
CLIENT_ID = "04863cc1e3584830a578622f50224d5b"
AUTHORIZE_URL = "https://todoist.com/oauth/authorize"
TOKEN_URL = "https://todoist.com/oauth/access_token"
SCOPE = "data:read_write,data:delete,project:delete"
CODE_CHALLENGE_METHOD = "S256"

# OAuth callback server
# The redirect URI is registered with Todoist, so the port is fixed.
OAUTH_CALLBACK_HOST = "localhost"
OAUTH_CALLBACK_PORT = 8765
OAUTH_CALLBACK_PATH = "/callback"
REDIRECT_URI = f"http://{OAUTH_CALLBACK_HOST}:{OAUTH_CALLBACK_PORT}{OAUTH_CALLBACK_PATH}"

# 3 minutes
DEFAULT_CALLBACK_TIMEOUT = 180
