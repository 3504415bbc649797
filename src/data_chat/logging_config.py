"""
Centralized logging configuration.

Configure once in the API lifespan (or a script entry point), not per module.
"""

import logging
import sys


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Configure Python logging for the entire application.

    Idempotent: does nothing if the root logger already has handlers
    (e.g. when uvicorn or pytest configured logging first).

    Args:
        level: Logging level as int or name ("INFO", "DEBUG", ...)
    """
    root_logger = logging.getLogger()

    if root_logger.handlers:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("data_chat.datasets").setLevel(logging.INFO)
    logging.getLogger("data_chat.core.config_loader").setLevel(logging.INFO)

    # Reduce noise
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
