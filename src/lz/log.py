"""Logging setup for lz."""

import logging
import os
import sys
from dataclasses import dataclass

LOGGER_NAME = "lz"
LEVEL_ENV_VAR = "LZ_LOG_LEVEL"

_LEVEL_MAP: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Marks handlers installed here so reconfiguring replaces only ours.
_OWNED_ATTR = "_lz_owned"


@dataclass(frozen=True)
class LoggingConfig:
    """
    How the ``lz`` logger is set up.

    Attributes:
        level: Minimum severity level to emit.
        console: Emit to stderr. Turned off by the browser, which owns the terminal.
        log_file: Optional path for a plain file handler.
        textual: Route records to Textual's devtools console instead.
    """

    level: str = "WARNING"
    console: bool = True
    log_file: str | None = None
    textual: bool = False
    console_fmt: str = "lz: %(levelname)s: %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


def level_from_verbosity(verbosity: int) -> str:
    """Map -v flags to a level name; LZ_LOG_LEVEL wins when no flag was given."""
    if verbosity <= 0:
        return os.environ.get(LEVEL_ENV_VAR, "WARNING").upper()
    return "INFO" if verbosity == 1 else "DEBUG"


def configure_logging(cfg: LoggingConfig) -> logging.Logger:
    """Install handlers on the ``lz`` logger, replacing any installed earlier."""
    logger = logging.getLogger(LOGGER_NAME)
    level = _LEVEL_MAP.get(cfg.level.upper(), logging.WARNING)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if getattr(handler, _OWNED_ATTR, False):
            logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = []
    if cfg.textual:
        from textual.logging import TextualHandler

        handlers.append(TextualHandler())
    elif cfg.console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter(cfg.console_fmt))
        handlers.append(stream)
    if cfg.log_file:
        file_handler = logging.FileHandler(cfg.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        setattr(handler, _OWNED_ATTR, True)
        logger.addHandler(handler)
    return logger
