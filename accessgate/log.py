"""Pluggable logging used by the enforcer and model."""

from __future__ import annotations

import abc
import logging

_std_logger = logging.getLogger("accessgate")


def _sprint(args: tuple) -> str:
    """Join operands, adding a space between two that are not strings."""
    parts: list[str] = []
    previous = None
    for index, arg in enumerate(args):
        if index and not isinstance(arg, str) and not isinstance(previous, str):
            parts.append(" ")
        parts.append(str(arg))
        previous = arg
    return "".join(parts)


class Logger(abc.ABC):
    """Interface for loggers."""

    @abc.abstractmethod
    def enable_log(self, enable: bool) -> None:
        """Turn logging on or off."""

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        """Return whether logging is on."""

    @abc.abstractmethod
    def print(self, *args) -> None:
        """Log the operands."""

    @abc.abstractmethod
    def printf(self, fmt: str, *args) -> None:
        """Log a %-style formatted message."""


class DefaultLogger(Logger):
    """Logger writing to the standard ``logging`` module; off by default."""

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled

    def enable_log(self, enable: bool) -> None:
        self._enabled = enable

    def is_enabled(self) -> bool:
        return self._enabled

    def print(self, *args) -> None:
        if self._enabled:
            _std_logger.info("%s", _sprint(args))

    def printf(self, fmt: str, *args) -> None:
        if self._enabled:
            _std_logger.info("%s", fmt % args if args else fmt)


class _Registry:
    """Holds the logger currently in use."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger


_registry = _Registry(DefaultLogger())


def set_logger(logger: Logger) -> None:
    """Replace the current logger."""
    _registry.logger = logger


def get_logger() -> Logger:
    """Return the current logger."""
    return _registry.logger


def log_print(*args) -> None:
    """Log the operands with the current logger."""
    _registry.logger.print(*args)


def log_printf(fmt: str, *args) -> None:
    """Log a formatted message with the current logger."""
    _registry.logger.printf(fmt, *args)