"""
Logging setup for the relinker CLI.

Modules log through ``logging.getLogger(__name__)``, which puts them
all under the ``relinker`` logger configured here. Console output goes
to stderr so ``--json`` documents on stdout stay parseable.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  RELINKER_LOG_LEVEL  >  WARNING

RELINKER_LOG_FILE adds a file handler at RELINKER_LOG_FILE_LEVEL
(default DEBUG), so a quiet run still leaves a trace of every apt,
cmake and patchelf command it ran.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping

LOGGER_NAME = "relinker"

ENV_LEVEL = "RELINKER_LOG_LEVEL"
ENV_FILE = "RELINKER_LOG_FILE"
ENV_FILE_LEVEL = "RELINKER_LOG_FILE_LEVEL"

# Console: bare warnings for interactive runs, timestamps once the
# user asks for progress.
_CONSOLE_WARNING = "%(levelname)s: %(message)s"
_CONSOLE_INFO = "%(asctime)s %(message)s"
_CONSOLE_DEBUG = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_CONSOLE_DATEFMT = "%H:%M:%S"

_FILE_FMT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> int:
    """Console level from the global CLI flags and the environment."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    env = os.environ if env is None else env
    return _parse_level(env.get(ENV_LEVEL), logging.WARNING)


def setup_logging(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> logging.Logger:
    """Configure the ``relinker`` logger for one CLI invocation.

    Safe to call repeatedly: handlers from a previous call are replaced.

    Returns:
        The configured ``relinker`` logger.
    """
    env = os.environ if env is None else env
    console_level = resolve_level(debug=debug, verbose=verbose, quiet=quiet, env=env)

    if console_level <= logging.DEBUG:
        fmt = _CONSOLE_DEBUG
    elif console_level <= logging.INFO:
        fmt = _CONSOLE_INFO
    else:
        fmt = _CONSOLE_WARNING

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=_CONSOLE_DATEFMT))

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(console)
    logger.propagate = False

    level = console_level
    log_file = env.get(ENV_FILE)
    if log_file:
        file_level = _parse_level(env.get(ENV_FILE_LEVEL), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        logger.addHandler(fh)
        level = min(level, file_level)

    logger.setLevel(level)
    return logger


def _parse_level(name: str | None, default: int) -> int:
    if not name:
        return default
    numeric = logging.getLevelName(name.strip().upper())
    return numeric if isinstance(numeric, int) else default
