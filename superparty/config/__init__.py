"""Configuration module."""

from superparty.config.constants import TTSConstants
from superparty.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "TTSConstants"]
