"""
Configuration management for the Backend PayShield engine.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for engine configuration.
"""

from backend_payshield.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
