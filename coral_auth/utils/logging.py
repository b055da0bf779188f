"""Centralized logging configuration for coral-auth."""

import logging
import re
import sys
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from coral_auth.config import Settings


def debug_enabled(patterns: str, namespace: str) -> bool:
    """Check whether a DEBUG-style pattern list enables a namespace.

    Patterns are separated by commas or whitespace, ``*`` matches anything
    and a leading ``-`` excludes the namespace, e.g. ``coral-auth:*,-coral-auth:db``.

    Args:
        patterns: Raw value of the DEBUG environment variable
        namespace: Namespace to test, e.g. ``coral-auth:db``

    Returns:
        True if some pattern matches and no exclusion does
    """
    enabled = False
    for raw in re.split(r"[\s,]+", patterns or ""):
        if not raw:
            continue
        skip = raw.startswith("-")
        pattern = raw[1:] if skip else raw
        regex = "^" + ".*?".join(re.escape(part) for part in pattern.split("*")) + "$"
        if re.match(regex, namespace):
            if skip:
                return False
            enabled = True
    return enabled


def setup_logging(
    settings: "Settings",
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None,
) -> None:
    """Configure logging for the application.

    Args:
        settings: Application settings
        level: Override log level (default: INFO for production, DEBUG otherwise)
    """
    if level is None:
        level = "INFO" if settings.is_production else "DEBUG"

    # Root logger configuration
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("authlib").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    # DEBUG=coral-auth:db turns on query logging through the root handler
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_debug_enabled else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class LogContext:
    """Prefixes log messages with structured context, e.g. [strategy=local]."""

    def __init__(self, logger: logging.Logger, **context: str) -> None:
        """Initialize the log context.

        Args:
            logger: The logger to use
            **context: Key-value pairs to include in log messages
        """
        self.logger = logger
        self.context = context
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def debug(self, msg: str, *args, **kwargs) -> None:
        """Log a debug message with context."""
        self.logger.debug(f"{self.prefix} {msg}", *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        """Log an info message with context."""
        self.logger.info(f"{self.prefix} {msg}", *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        """Log a warning message with context."""
        self.logger.warning(f"{self.prefix} {msg}", *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        """Log an error message with context."""
        self.logger.error(f"{self.prefix} {msg}", *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        """Log an exception with context."""
        self.logger.exception(f"{self.prefix} {msg}", *args, **kwargs)
