"""Configuration package."""

from .settings import (
    get_app_name,
    get_app_version,
    get_default_gst_percentage,
    get_log_level,
)
from .profile_loader import ProfileConfig, get_default_profile, list_available_profiles, load_profile
from .profile_manager import get_profile, reset_profile, set_profile

__all__ = [
    'get_app_name',
    'get_app_version',
    'get_default_gst_percentage',
    'get_log_level',
    'ProfileConfig',
    'get_default_profile',
    'list_available_profiles',
    'load_profile',
    'get_profile',
    'reset_profile',
    'set_profile',
]
