"""Configuration loader for td

Values resolve in this order:
1. Variables exported in the shell
2. A ``.env`` file in the working directory
3. The defaults declared in ``settings.py``
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUE_VALUES = ('true', '1', 'yes', 'on')


def _coerce(env_var: str, raw: str, default: Any) -> Any:
    """Convert a raw environment string to the type of ``default``"""
    # bool is a subclass of int, so it has to be checked first
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES

    for kind in (int, float):
        if isinstance(default, kind):
            try:
                return kind(raw)
            except ValueError:
                logger.warning(f"Ignoring {env_var}={raw!r}: not a valid {kind.__name__}, using {default}")
                return default

    return raw


class ConfigLoader:
    """Typed access to td settings in the environment

    Args:
        env_path: ``.env`` file to load (defaults to ``./.env``)
    """

    def __init__(self, env_path: Optional[str] = None):
        self.env_path = Path(env_path) if env_path else Path(".env")
        if self.env_path.exists():
            # Shell exports always win over the file
            load_dotenv(dotenv_path=self.env_path, override=False)
            logger.debug(f"Loaded settings from {self.env_path}")

    def get(self, env_var: str, default: Any) -> Any:
        """Setting value, typed like its default

        Paths starting with ``~/`` are expanded.
        """
        raw = os.getenv(env_var)
        value = default if raw is None or raw == "" else _coerce(env_var, raw, default)

        if isinstance(value, str) and value.startswith("~/"):
            return str(Path(value).expanduser())
        return value

    def get_optional(self, env_var: str) -> Optional[str]:
        """Stripped value of a setting without default; None when unset or blank"""
        raw = os.getenv(env_var)
        if raw is None or not raw.strip():
            return None
        return raw.strip()


_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Process-wide loader, created on first use"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config_loader() -> None:
    """Forget the process-wide loader so the next call re-reads ``.env``"""
    global _config_loader
    _config_loader = None
