"""
Logging configuration for the order surcharges package.

Usage:
    from order_surcharges.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
    RECONCILE_LOG_LEVEL: Level for the surcharge decision loggers
        (order_surcharges.surcharges.*). Every add/update/remove decision is
        logged at INFO there, so busy shops usually raise this to WARNING.
        Defaults to the package level.
"""
import logging
import os
import sys

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

PACKAGE_LOGGER = "order_surcharges"
RECONCILE_LOGGER = "order_surcharges.surcharges"


def _parse_level(value: str, default: str) -> str:
    value = (value or "").strip().upper()
    return value if value in VALID_LEVELS else default


def setup_logging(level: str = None, reconcile_level: str = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, reads from LOG_LEVEL env var, defaults to INFO.
        reconcile_level: Level for the surcharge decision loggers. If not
               provided, reads RECONCILE_LOG_LEVEL, defaults to ``level``.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = _parse_level(level, "INFO")

    if reconcile_level is None:
        reconcile_level = os.getenv("RECONCILE_LOG_LEVEL", level)
    reconcile_level = _parse_level(reconcile_level, level)

    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)
    logging.getLogger(RECONCILE_LOGGER).setLevel(getattr(logging, reconcile_level))

    # SQL echo is only useful when debugging the config table
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured at %s level (reconcile: %s)", level, reconcile_level)
