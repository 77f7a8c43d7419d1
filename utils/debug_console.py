"""Debug logging and console capture for td

With ``--debug`` every module logger writes to the debug log file, and the
rich console mirrors what it prints into the same file so a bug report shows
the user-facing output next to the log lines that produced it.
"""

import io
import logging
import os
import re
from typing import Optional

from rich.console import Console as RichConsole

_ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class DebugCapturingConsole(RichConsole):
    """Rich Console that also logs a plain-text copy of its output"""

    def __init__(self, debug_logger: Optional[logging.Logger] = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        super().print(*objects, **kwargs)

        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            plain_text = self._render_to_plain_text(*objects, **kwargs)
            if plain_text.strip():
                self.debug_logger.debug(f"{self._log_prefix}{plain_text}")

    def _render_to_plain_text(self, *objects, **kwargs) -> str:
        """Render objects the way print() would, without markup or ANSI codes"""
        buffer = io.StringIO()
        temp_console = RichConsole(
            file=buffer,
            force_terminal=False,
            width=self.width,
            legacy_windows=False,
        )
        temp_console.print(*objects, **kwargs)
        return _ANSI_ESCAPE.sub('', buffer.getvalue()).rstrip()


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None,
                         stderr: bool = False) -> RichConsole:
    """Console for CLI output: capturing in debug mode, plain otherwise"""
    if debug_enabled and debug_logger:
        return DebugCapturingConsole(debug_logger=debug_logger, stderr=stderr)
    return RichConsole(stderr=stderr)


def setup_debug_logger(log_file: str) -> logging.Logger:
    """Dedicated logger receiving the console copy

    Args:
        log_file: Path to debug log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("debug_console")
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    logger.addHandler(file_handler)

    # Keep console copies out of the root handlers
    logger.propagate = False

    return logger


def configure_logging(debug: bool, log_level: str = "warning",
                      log_file: str = "td_debug.log") -> Optional[logging.Logger]:
    """Configure the root logger for a CLI run

    Args:
        debug: Log everything to ``log_file`` and stderr
        log_level: Root level name when not in debug mode
        log_file: Debug log path (appended to)

    Returns:
        The console-capture logger in debug mode, None otherwise
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if not debug:
        level = getattr(logging, str(log_level).upper(), logging.WARNING)
        logging.basicConfig(level=level, format='%(levelname)s: %(message)s')
        return None

    root_logger.setLevel(logging.DEBUG)
    log_path = os.path.abspath(log_file)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    # httpx logs every request at INFO; keep it to warnings
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Debug logging enabled - appending to {log_path}")
    return setup_debug_logger(log_path)
