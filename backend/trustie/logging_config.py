"""Shared logging configuration.

Call ``configure_logging()`` once at startup. It is idempotent: if the root
logger already has handlers (uvicorn, pytest), it only adjusts the level.
"""

import logging


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure the root logger with a console handler."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not root.handlers:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    root.setLevel(level)
