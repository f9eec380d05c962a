"""Configuration loading helpers for CLI entrypoints."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional

CONFIG_DIR = Path.home() / ".config" / "linkaudit"
CONFIG_ENV_FILE = CONFIG_DIR / ".env"
EXAMPLE_ENV_FILE = Path(__file__).parent.parent / ".env.example"

# Points at an explicit .env file; wins over every other location.
ENV_FILE_VARIABLE = "LINKAUDIT_ENV_FILE"

LOGGER = logging.getLogger(__name__)


def _candidates(
    cwd: Path,
    config_env_file: Path,
    environ: Mapping[str, str],
) -> Iterator[Path]:
    explicit = environ.get(ENV_FILE_VARIABLE)
    if explicit:
        yield Path(explicit).expanduser()
    yield cwd / ".env"
    yield config_env_file


def load_config(
    *,
    cwd: Path,
    load_env: Callable[[Path], bool],
    copy_file: Callable[[Path, Path], object],
    config_env_file: Path = CONFIG_ENV_FILE,
    example_file: Path = EXAMPLE_ENV_FILE,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Load the first .env file found and return its path.

    Search order:
    1. ``$LINKAUDIT_ENV_FILE``
    2. .env in the current working directory
    3. ~/.config/linkaudit/.env

    When none exists, .env.example is copied to the user config file as a
    starting point. Returns ``None`` when nothing could be loaded; the
    built-in defaults then apply.
    """
    environ = os.environ if environ is None else environ
    for candidate in _candidates(cwd, config_env_file, environ):
        if candidate.is_file():
            load_env(candidate)
            return candidate

    if not example_file.is_file():
        return None

    try:
        config_env_file.parent.mkdir(parents=True, exist_ok=True)
        copy_file(example_file, config_env_file)
    except OSError as exc:
        LOGGER.debug("Could not create %s: %s", config_env_file, exc)
        return None

    LOGGER.info(
        "Created config file at %s from .env.example. "
        "Edit it to change the user agent, timeout or rate limit.",
        config_env_file,
    )
    load_env(config_env_file)
    return config_env_file
