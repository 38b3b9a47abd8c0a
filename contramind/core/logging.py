import logging
import sys

from contramind.core.config import settings

DEFAULT_LOG_LEVEL = settings.LOG_LEVEL

# Request lines from these clients carry signed storage URLs.
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: int | str = DEFAULT_LOG_LEVEL) -> None:
    """Idempotent logging configuration for the service."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()
