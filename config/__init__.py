"""
Configuration module for the model asset manager.
"""

from .settings import Settings, settings, get_settings, reload_settings

__all__ = ["Settings", "settings", "get_settings", "reload_settings"]
