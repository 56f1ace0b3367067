"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

from .env import optional_env_var

LOG_LEVEL_ENV = "DIFFCHANGE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or ``DIFFCHANGE_LOG_LEVEL``) into a numeric level, default INFO."""

    candidate = level if level is not None else optional_env_var(LOG_LEVEL_ENV)
    if candidate is None:
        return logging.INFO
    if isinstance(candidate, int):
        return candidate
    resolved = logging.getLevelNamesMapping().get(candidate.upper())
    if resolved is None:
        raise ValueError(f"Unknown log level: {candidate}")
    return resolved


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Configure the root logger with a terse format; ``force`` replaces earlier setup."""

    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
