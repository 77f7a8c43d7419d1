"""Shared utilities package for td"""

from .storage import TokenStorage
from .debug_console import (
    DebugCapturingConsole,
    configure_logging,
    create_debug_console,
    setup_debug_logger,
)

__all__ = [
    "TokenStorage",
    "DebugCapturingConsole",
    "configure_logging",
    "create_debug_console",
    "setup_debug_logger",
]
