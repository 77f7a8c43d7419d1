import json
import logging
import os
import platform
from pathlib import Path
from typing import Any, Dict, Optional

import settings
from config import get_config_loader
from errors import AuthenticationRequiredError
from oauth.validators import is_personal_token_format, validate_token_format

logger = logging.getLogger(__name__)


class TokenStorage:
    """API token storage in the td config file

    The ``TODOIST_API_TOKEN`` environment variable takes priority over the
    file on every load. Other keys in the config file are preserved.
    """

    def __init__(self, config_file: Optional[str] = None, env_var: Optional[str] = None):
        self.config_path = Path(config_file if config_file else settings.CONFIG_FILE)
        self.env_var = env_var or settings.API_TOKEN_ENV_VAR

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.config_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def _read_config(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}
        try:
            data = json.loads(self.config_path.read_text())
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config file {self.config_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_config(self, data: Dict[str, Any]):
        self._ensure_secure_directory()
        self.config_path.write_text(json.dumps(data, indent=2) + "\n")
        # Set file permissions to 600 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(self.config_path, 0o600)

    def _env_token(self) -> Optional[str]:
        return get_config_loader().get_optional(self.env_var)

    def load(self) -> Optional[str]:
        """Current token: environment first, then the config file"""
        env_token = self._env_token()
        if env_token:
            return env_token
        token = self._read_config().get("api_token")
        return token if isinstance(token, str) and token else None

    def require(self) -> str:
        """Current token, or an error telling the user how to log in"""
        token = self.load()
        if not token:
            raise AuthenticationRequiredError(
                f"No API token found. Run `td auth login`, `td auth token <token>`, "
                f"or set {self.env_var}."
            )
        return token

    def save(self, token: str):
        """Persist a token, keeping any other settings in the file

        Raises:
            ValueError: If the token is empty, too short or contains whitespace
        """
        if not validate_token_format(token):
            raise ValueError("Invalid token: Token must be at least 10 characters with no spaces")

        data = self._read_config()
        data["api_token"] = token.strip()
        self._write_config(data)
        logger.debug(f"Saved API token to {self.config_path}")

    def clear(self):
        """Remove the stored token (other settings are kept)"""
        data = self._read_config()
        if "api_token" not in data:
            return
        del data["api_token"]
        self._write_config(data)
        logger.info(f"Removed API token from {self.config_path}")

    def get_status(self) -> Dict[str, Any]:
        """Get token status without exposing secrets"""
        if self._env_token():
            source = "environment"
        elif self._read_config().get("api_token"):
            source = "config_file"
        else:
            source = None

        token = self.load()
        token_type = None
        if token:
            token_type = "personal" if is_personal_token_format(token) else "oauth"

        return {
            "has_token": token is not None,
            "source": source,
            "token_type": token_type,
            "env_var": self.env_var,
            "config_file": str(self.config_path),
        }

    @property
    def config_file(self) -> Path:
        """Get the config file path"""
        return self.config_path
