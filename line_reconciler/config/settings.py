"""Environment-driven settings."""

import logging
import os
from importlib import metadata
from typing import Optional

logger = logging.getLogger(__name__)

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_app_name() -> str:
    """Get application name."""
    return "GST Line Reconciler"


def get_app_version() -> str:
    """Get application version from the installed distribution metadata."""
    try:
        return metadata.version("gst-line-reconciler")
    except metadata.PackageNotFoundError:
        # Running from a source checkout
        return "0.1.0"


def get_log_level() -> str:
    """Get log level name.

    Returns:
        LOG_LEVEL environment variable (upper-cased), default "INFO"
    """
    level = os.getenv('LOG_LEVEL', 'INFO').upper()
    if level not in _VALID_LOG_LEVELS:
        logger.warning(f"Invalid LOG_LEVEL: {level}, using 'INFO'")
        return 'INFO'
    return level


def get_default_gst_percentage() -> Optional[float]:
    """Get an override for the default GST rate of new lines.

    Returns:
        DEFAULT_GST_PERCENTAGE as float, or None when unset/invalid
    """
    raw = os.getenv('DEFAULT_GST_PERCENTAGE')
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid DEFAULT_GST_PERCENTAGE: {raw!r}, ignoring")
        return None
