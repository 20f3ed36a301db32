# corona_map/config/__init__.py
# This file makes the 'config' directory a Python package.
# It exposes the singleton 'settings' instance for easy, clean importing.

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
