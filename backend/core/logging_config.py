"""
Loguru logging configuration with Sentry integration.

- Console logging for development, JSON lines everywhere else
- Correlation ID in all log messages
- Rotating file sink (skipped under the test environment)
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """
    Add correlation ID to log record.

    Args:
        record: Loguru log record.

    Returns:
        Always True (filter never drops messages).
    """
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(
    environment: str = "development", logs_dir: str | Path = "logs"
) -> None:
    """
    Configure Loguru for the application.

    Args:
        environment: "development" for coloured console output, "test" for
            console only, anything else for JSON output.
        logs_dir: Directory for the rotating log file.
    """
    logger.remove()

    if environment in ("development", "test"):
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level="DEBUG",
            filter=correlation_filter,
            colorize=environment == "development",
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level="INFO",
            filter=correlation_filter,
            serialize=True,  # JSON output
        )

    if environment == "test":
        return

    logs_path = Path(logs_dir)
    logs_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        logs_path / "app.log",
        format=LOG_FORMAT if environment == "development" else "{message}",
        level="INFO",
        filter=correlation_filter,
        rotation="10 MB",
        retention="7 days",
        serialize=(environment != "development"),
    )
