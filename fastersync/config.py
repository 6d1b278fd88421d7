"""
fastersync Configuration

Process-wide settings for the synchronization primitives, read from the
environment on first use.
"""

import logging
import os
from typing import Literal, Optional

from pydantic import BaseModel

ENV_PREFIX = "FASTERSYNC_"

LOG_FORMAT = "[fastersync %(process)d] %(levelname)s: %(message)s"


class Settings(BaseModel):
    """
    Runtime settings.

    Attributes:
        double_settle: What a second settle call on an already settled
            future does. "raise" keeps asyncio's InvalidStateError,
            "ignore" turns the call into a no-op.
        log_level: Level used by configure_logging() when none is given.
    """

    double_settle: Literal["raise", "ignore"] = "raise"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from FASTERSYNC_* environment variables.

        Raises:
            pydantic.ValidationError if a variable holds an invalid value
        """
        values = {}
        for field in cls.model_fields:
            raw = os.environ.get(ENV_PREFIX + field.upper())
            if raw is not None:
                values[field] = raw.strip().lower() if field == "double_settle" else raw.strip()
        return cls(**values)


_settings: Optional[Settings] = None
_handler: Optional[logging.Handler] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them from the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Replace the process-wide settings (None reloads from the environment)."""
    global _settings
    _settings = settings


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the fastersync logger.

    Meant for applications and demos; the library itself never configures
    logging on import.

    Args:
        level: Logging level name (defaults to Settings.log_level)

    Returns:
        The package logger
    """
    global _handler
    logger = logging.getLogger("fastersync")
    logger.setLevel((level or get_settings().log_level).upper())
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in logger.handlers:
        logger.addHandler(_handler)
    return logger
