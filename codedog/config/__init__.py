"""Configuration module."""

from codedog.config.constants import DOG, DogConstants
from codedog.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "DogConstants", "DOG"]
