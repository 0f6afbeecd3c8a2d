"""Configuration package."""

from fri.config.settings import Settings

__all__ = ["Settings"]
