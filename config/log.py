"""Logging setup for host applications embedding the engine."""

from __future__ import annotations

import logging

from config.settings import get_settings

__all__ = ["LOGGER_NAMESPACE", "configure_logging"]

LOGGER_NAMESPACE = "clearledger"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Install a basic handler and return the package root logger.

    The engine modules only create named loggers under ``clearledger``;
    attaching handlers is left to whoever embeds them.
    """

    resolved = level if level is not None else get_settings().log_level
    if isinstance(resolved, str):
        resolved = resolved.upper()

    logging.basicConfig(format=_FORMAT)
    root = logging.getLogger(LOGGER_NAMESPACE)
    root.setLevel(resolved)
    return root
