"""
Configuration package.

Exports the singleton settings instance for easy importing.

Usage:
    from nextcut.config import settings

    print(settings.minutes_per_customer)
"""

from nextcut.config.settings import settings, get_settings, print_settings, Settings

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "print_settings",
]
