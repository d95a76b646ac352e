"""
Logging setup for the session auth server.

Loggers get a rich RichHandler unless the `log_rich` setting is off, in which
case a stdout handler prints `time | level | message` with ANSI colours.
"""
import copy
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

RESET = "\033[0m"
TIME_COLOR = "\033[34m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}


def _paint(text: str, color: Optional[str]) -> str:
    return f"{color}{text}{RESET}" if color else text


class ColorfulFormatter(logging.Formatter):
    """Colours the level name and timestamp of each record."""

    def formatTime(self, record, datefmt=None):
        return _paint(super().formatTime(record, datefmt), TIME_COLOR)

    def format(self, record):
        # records are shared between handlers
        record = copy.copy(record)
        record.levelname = _paint(record.levelname, LEVEL_COLORS.get(record.levelno))
        return super().format(record)


def _rich_handler() -> logging.Handler:
    console = Console()
    handler = RichHandler(
        console=console,
        show_path=False,
        enable_link_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_width=console.width,
    )
    # time and level are rendered by rich
    handler.setFormatter(logging.Formatter("%(message)s", datefmt=DATE_FORMAT))
    return handler


def _plain_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorfulFormatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_colorful_logger(name: Optional[str] = None, level: int = logging.INFO, rich: bool = True) -> logging.Logger:
    """
    Logger `name` at `level`, given one handler on first use.

    A logger that already has handlers only gets its level updated.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        handler = _rich_handler() if rich else _plain_handler()
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger
