"""Core configuration for WagerLab."""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
