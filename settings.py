from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging configuration
LOG_LEVEL = config.get("TD_LOG_LEVEL", "warning")
DEBUG_LOG_FILE = config.get("TD_DEBUG_LOG", "td_debug.log")

# Todoist API endpoints (hardcoded - not user configurable)
# Commands, reminders, goals and user settings use the unified v1 sync endpoint;
# filters and live notifications are still served by the legacy v9 endpoint.
API_BASE = "https://api.todoist.com"
SYNC_URL = f"{API_BASE}/api/v1/sync"
SYNC_V9_URL = f"{API_BASE}/sync/v9/sync"
STATS_URL = f"{API_BASE}/sync/v9/completed/get_stats"

# Timeout configuration
# Connection timeout: Time to establish TCP connection
CONNECT_TIMEOUT = config.get("TD_CONNECT_TIMEOUT", 10.0)
# Request timeout: Total timeout for a single API request
REQUEST_TIMEOUT = config.get("TD_REQUEST_TIMEOUT", 30.0)
# Callback timeout: how long `td auth login` waits for the browser redirect
CALLBACK_TIMEOUT = config.get("TD_CALLBACK_TIMEOUT", 180)

# Token storage
CONFIG_FILE = config.get("TD_CONFIG_FILE", str(Path.home() / ".config" / "todoist-cli" / "config.json"))

# Environment token override, checked before the config file on every load
API_TOKEN_ENV_VAR = "TODOIST_API_TOKEN"
