"""Errors raised while loading configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for unusable configuration."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""


class InvalidConfigurationError(ConfigurationError):
    """An environment variable is set but cannot be interpreted."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"{name} must be {expected}, got {value!r}")
        self.name = name
        self.value = value
