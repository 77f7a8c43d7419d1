"""CLI package for td

Argument parsing lives in ``cli.main``; command handlers receive a
``CommandContext``, the parsed arguments and a rich console.
"""

from cli.context import CommandContext
from cli.main import build_parser, main, run

__all__ = [
    "CommandContext",
    "build_parser",
    "main",
    "run",
]
