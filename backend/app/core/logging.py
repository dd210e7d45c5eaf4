"""
Logging configuration for the dashboard backend.

Console output is colorized; file sinks are opt-in through ``LOG_TO_FILE``
and rotate independently for all records and for errors only.
"""

from pathlib import Path
import sys

from loguru import logger

from app.core.config import get_settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{extra[request_id]} | "
    "<level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra[request_id]} | {message}"


def setup_logging() -> None:
    """Replace loguru's default handler with the dashboard sinks.

    Safe to call more than once; every call starts from a clean handler list.
    """
    settings = get_settings()

    logger.remove()
    logger.configure(extra={"request_id": "-"})

    logger.add(
        sys.stdout,
        format=_CONSOLE_FORMAT,
        level=settings.LOG_LEVEL,
        colorize=True,
    )

    if not settings.LOG_TO_FILE:
        return

    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)

    logger.add(
        logs_dir / "dashboard-error.log",
        format=_FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )
    logger.add(
        logs_dir / "dashboard.log",
        format=_FILE_FORMAT,
        level=settings.LOG_LEVEL,
        rotation="50 MB",
        retention="7 days",
        compression="zip",
    )
