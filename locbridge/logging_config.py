"""Logging setup for the CLI and the web app."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Library loggers that would drown our own output
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
}


def setup_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    """Route log records through rich, at the given level for locbridge."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("locbridge").setLevel(level.upper())
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
