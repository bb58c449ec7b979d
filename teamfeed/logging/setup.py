import sys
import logging
import re
from typing import Any

from loguru import logger

from teamfeed.config.settings import settings

BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+", re.IGNORECASE)


def mask_secret(value: str) -> str:
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "********"


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive data in log records."""
    sensitive_keys = ["key", "token", "password", "secret", "authorization"]

    # Mask sensitive values bound through logger.bind(...) / extra kwargs
    extra = record.get("extra")
    if isinstance(extra, dict):
        for extra_key, extra_value in list(extra.items()):
            if any(sk in extra_key.lower() for sk in sensitive_keys):
                extra[extra_key] = (
                    mask_secret(extra_value)
                    if isinstance(extra_value, str)
                    else "********"
                )

    # Apply masking specifically to known sensitive settings if they appear in the message
    for original in (settings.supabase_key, settings.supabase_service_key):
        if original and original in record["message"]:
            record["message"] = record["message"].replace(original, "********")

    record["message"] = BEARER_PATTERN.sub(r"\1********", record["message"])
    return True  # Keep the record after filtering/masking


class InterceptHandler(logging.Handler):
    """Routes stdlib logging records (httpx, httpcore, supabase) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str | None = None) -> None:
    """Configures Loguru logger based on application settings."""
    level = (level or settings.log_level).upper()
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,  # Locals may hold credentials
        filter=sensitive_data_filter,
    )

    logger.info(f"Logging initialized with level: {level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Standard logging intercepted.")
