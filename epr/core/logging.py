"""Logging bootstrap."""

from __future__ import annotations

import logging

from epr.core.config import LoggingSettings, get_settings


def configure_logging(settings: LoggingSettings | None = None) -> None:
    settings = settings or get_settings().logging
    logging.basicConfig(level=settings.level.upper(), format=settings.format)
    # SQLAlchemy echo is controlled by DatabaseSettings.echo
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
