"""Active profile shared by the CLI and the API process."""

import logging
from typing import Optional

from .profile_loader import ProfileConfig, get_default_profile, load_profile
from .settings import get_default_gst_percentage

logger = logging.getLogger(__name__)

# Configuration only; sessions and documents are never stored here
_active: Optional[ProfileConfig] = None


def _with_env_overrides(profile: ProfileConfig) -> ProfileConfig:
    gst_override = get_default_gst_percentage()
    if gst_override is not None:
        logger.debug(f"DEFAULT_GST_PERCENTAGE={gst_override} overrides profile '{profile.name}'")
        profile.default_gst_percentage = gst_override
    return profile


def set_profile(profile_name: str = "default") -> ProfileConfig:
    """Load profile_name and make it the active profile.

    Raises:
        FileNotFoundError: If the profile does not exist
        ValueError: If the profile is invalid
    """
    global _active
    _active = _with_env_overrides(load_profile(profile_name))
    logger.info(f"Using profile '{_active.name}'")
    return _active


def get_profile() -> ProfileConfig:
    """Active profile; the default profile until set_profile() is called."""
    global _active
    if _active is None:
        _active = _with_env_overrides(get_default_profile())
    return _active


def reset_profile() -> None:
    """Forget the active profile."""
    global _active
    _active = None
