"""Logging and console setup for CLI"""

from rich.console import Console

import settings
from utils.debug_console import configure_logging, create_debug_console


def setup_console(debug: bool) -> Console:
    """
    Configure logging and build the console for this run

    Args:
        debug: Whether debug mode is enabled

    Returns:
        Console instance (either regular or debug-capturing)
    """
    debug_logger = configure_logging(debug, settings.LOG_LEVEL, settings.DEBUG_LOG_FILE)
    console = create_debug_console(debug_enabled=debug, debug_logger=debug_logger)

    if debug_logger:
        debug_logger.debug("[CLI] ===== CLI SESSION STARTED =====")

    return console
