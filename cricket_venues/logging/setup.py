import sys
import logging
from typing import Any

from loguru import logger

from cricket_venues.config.settings import settings


def url_query_filter(record: dict[str, Any]) -> bool:
    """Strips query strings from URLs passed in the 'extra' dict."""
    extra = record.get("extra")
    if isinstance(extra, dict):
        for key, value in extra.items():
            if key.endswith("url") and isinstance(value, str) and "?" in value:
                extra[key] = value.split("?", 1)[0]
    return True


def setup_logging() -> None:
    """Configures Loguru logger based on application settings."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=True,
        filter=url_query_filter,
    )

    if settings.log_file:
        logger.add(
            str(settings.log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            filter=url_query_filter,
        )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    # Intercept standard logging messages (httpx logs through it)
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.info("Standard logging intercepted.")
