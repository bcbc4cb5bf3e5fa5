"""
Logging Configuration
Loguru sinks for the revenue cycle API, with stdlib records routed through them
Source: https://github.com/Delgan/loguru
Source: https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
"""

import inspect
import logging
import re
import sys
from pathlib import Path

from loguru import logger

# Member and subscriber identifiers are masked before any sink sees them
MASK_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(member(?:_id)?[ =:]+)([A-Za-z0-9-]+)", re.IGNORECASE), r"\1***"),
    (re.compile(r"\bMBR-[A-Za-z0-9]+\b"), "MBR-***"),
]

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def mask_identifiers(message: str) -> str:
    for pattern, replacement in MASK_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def _mask_record(record) -> None:  # type: ignore[no-untyped-def]
    record["message"] = mask_identifiers(record["message"])


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (services, uvicorn) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module so loguru reports the right line
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        json_logs: Whether to output JSON format (useful for production)
    """
    logger.remove()
    logger.configure(patcher=_mask_record)

    if json_logs:
        logger.add(sys.stderr, format="{message}", level=level, serialize=True)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            format=FILE_FORMAT,
            level=level,
            serialize=json_logs,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logger.info(f"Logging configured: level={level}, json_logs={json_logs}")


def get_logger(name: str = __name__):  # type: ignore[no-untyped-def]
    """
    Get a logger bound to a component name.

    Example:
        >>> from revcycle.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Remittance batch received")
    """
    return logger.bind(name=name)
