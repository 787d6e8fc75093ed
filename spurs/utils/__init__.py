"""Utilities for spurs."""

from spurs.utils.console import ColorfulFormatter, configure_logging
from spurs.utils.shell import escape_for_bash, quote_arg, quote_path

__all__ = [
    "ColorfulFormatter",
    "configure_logging",
    "escape_for_bash",
    "quote_arg",
    "quote_path",
]
