"""Helpers shared by CLI command modules."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from prepcards.application.config import AppConfig, resolve_config
from prepcards.application.utils.dates import parse_timestamp
from prepcards.domain.errors import InvalidArgumentError
from prepcards.infrastructure.adapters.progress_file import JsonProgressRepository


def _resolve_with_overrides(**kwargs: Any) -> AppConfig:
    """Resolve config, ignoring CLI options the user left unset."""
    return resolve_config({k: v for k, v in kwargs.items() if v is not None})


def _log_level(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def _configure_logging(extra_verbosity: int = 0) -> int:
    """Set the prepcards logger level from config verbosity plus repeated -v flags."""
    verbosity = resolve_config().verbose + extra_verbosity
    level = _log_level(verbosity)
    logging.getLogger("prepcards").setLevel(level)
    return level


def _repository(progress_file: Path | None) -> JsonProgressRepository:
    config = _resolve_with_overrides(progress_file=progress_file)
    return JsonProgressRepository(config.progress_file)


def _parse_now(now: str | None) -> datetime | None:
    """Parse a --now override; None means use the system clock."""
    if now is None:
        return None
    return parse_timestamp(now)


def _fail(error: InvalidArgumentError) -> typer.Exit:
    typer.secho(f"Error: {error}", fg="red", err=True)
    return typer.Exit(1)
