"""Configuration module for planorder settings."""

from .settings import Settings, build_database_url, get_settings

__all__ = ["Settings", "build_database_url", "get_settings"]
