"""Configuration for uccmake."""

from .settings import BuildSettings, ConfigurationError

__all__ = [
    "BuildSettings",
    "ConfigurationError",
]
