"""Colorful console logging for operators watching remote commands."""

import logging
import re
import sys
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

COMPONENT_COLORS = {
    "spurs.commands": COLORS["bright_blue"],
    "spurs.services": COLORS["bright_magenta"],
    "spurs.server": COLORS["bright_cyan"],
    "spurs.config": COLORS["green"],
    "spurs.utils": COLORS["cyan"],
    "default": COLORS["white"],
}

# "<user>@<host>: <command>"
COMMAND_LINE = re.compile(r"^([^\s@]+@[^\s:]+):\s(.*)$", re.DOTALL)

NOISY_LOGGERS = (
    "asyncssh",
    "fastmcp",
    "httpx",
    "httpcore",
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "starlette",
    "anyio",
)


class ColorfulFormatter(logging.Formatter):
    """Log formatter with colored levels and highlighted remote commands."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith("spurs."):
            name = name[len("spurs.") :]
        return self._colorize(f"{name:<20}", self._get_component_color(record.name))

    def _highlight_message(self, record: logging.LogRecord, message: str) -> str:
        if not self.use_colors:
            return message

        if record.name == "spurs.commands":
            match = COMMAND_LINE.match(message)
            if match:
                who, command = match.groups()
                return (
                    f"{COLORS['blue']}{who}:{COLORS['reset']} "
                    f"{COLORS['yellow']}{COLORS['bold']}{command}{COLORS['reset']}"
                )

        # user@host:port patterns in connection messages
        return re.sub(
            r"(\w+@[\w.\-]+:\d+)",
            f"{COLORS['bright_magenta']}\\1{COLORS['reset']}",
            message,
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record, record.getMessage())
        line = (
            f"{timestamp} {sep} {self._format_level(record)} {sep} "
            f"{self._format_component(record)} {sep} {message}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", use_colors: bool = True) -> None:
    """Install the colorful formatter on the `spurs` logger.

    Colors are disabled when stderr is not a TTY. Calling this twice does
    not add a second handler.
    """
    if not sys.stderr.isatty():
        use_colors = False

    spurs_logger = logging.getLogger("spurs")
    spurs_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not spurs_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        spurs_logger.addHandler(handler)
        spurs_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
