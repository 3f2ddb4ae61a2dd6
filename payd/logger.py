"""Loggers with a small uniform interface."""

from __future__ import annotations

import logging
from typing import Any

_LEVELS = {
    "trace": 5,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "disabled": logging.CRITICAL + 10,
    "": logging.NOTSET,
}


def _silent_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    logger.disabled = True
    return logger


class NoopLogger:
    """A logger that discards everything; ``fatal`` does not exit."""

    def __init__(self, name: str = "payd.noop") -> None:
        self._logger = _silent_logger(name)

    def info(self, msg: str, *args: Any) -> None:
        self._logger.info(msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self._logger.debug(msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        self._logger.warning(msg, *args)

    def error(self, err: BaseException | None, msg: str, *args: Any) -> None:
        self._logger.error(msg, *args, exc_info=err)

    def fatal(self, err: BaseException | None, msg: str, *args: Any) -> None:
        self._logger.critical(msg, *args, exc_info=err)


class StdLogger:
    """A logger backed by the standard logging module.

    ``level`` is one of trace, debug, info, warn, error, fatal, panic or
    disabled; an unknown level raises ValueError. ``fatal`` logs and then
    exits the program.
    """

    def __init__(self, level: str = "info", name: str = "payd") -> None:
        try:
            numeric = _LEVELS[level.lower()]
        except KeyError:
            raise ValueError(f"failed to parse log level: unknown level {level!r}") from None
        self._logger = logging.getLogger(name)
        self._logger.setLevel(numeric)

    def info(self, msg: str, *args: Any) -> None:
        self._logger.info(msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self._logger.debug(msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        self._logger.warning(msg, *args)

    def error(self, err: BaseException | None, msg: str, *args: Any) -> None:
        self._logger.error(msg, *args, exc_info=err)

    def fatal(self, err: BaseException | None, msg: str, *args: Any) -> None:
        self._logger.critical(msg, *args, exc_info=err)
        raise SystemExit(1)