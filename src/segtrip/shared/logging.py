"""Structured logging utilities for segtrip.

Every pipeline component logs through a ``CorrelationLogger``, which stamps
each record with the component name and the run's correlation ID. The
command-line tool installs one stderr handler on the package logger that
prefixes every line with the program name.
"""

import logging
import sys
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER_NAME = "segtrip"
HANDLER_NAME = "segtrip-stderr"

Extra = Optional[Dict[str, Any]]


class CorrelationLogger:
    """Wrapper around a stdlib logger that adds run context to every record.

    Only ``debug``, ``info``, ``warning`` and ``error`` are wrapped; there is
    no ``critical`` or ``exception``. ``error`` attaches traceback information
    only when called with ``exc_info=True``, since the pipeline's errors are
    reported to the user as one-line messages.

    Attributes:
        logger: Underlying ``logging.Logger``
        correlation_id: Identifier shared by all records of one run
        component: Pipeline component emitting the records
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def _context(self, extra: Extra) -> Dict[str, Any]:
        context = {"component": self.component, "correlation_id": self.correlation_id}
        context.update(extra or {})
        return context

    def _log(self, level: int, message: str, extra: Extra, exc_info: bool) -> None:
        self.logger.log(level, message, extra=self._context(extra), exc_info=exc_info)

    def is_enabled_for(self, level: int) -> bool:
        """Check whether records at ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Extra = None, exc_info: bool = False) -> None:
        self._log(logging.DEBUG, message, extra, exc_info)

    def info(self, message: str, extra: Extra = None, exc_info: bool = False) -> None:
        self._log(logging.INFO, message, extra, exc_info)

    def warning(self, message: str, extra: Extra = None, exc_info: bool = False) -> None:
        self._log(logging.WARNING, message, extra, exc_info)

    def error(self, message: str, extra: Extra = None, exc_info: bool = False) -> None:
        self._log(logging.ERROR, message, extra, exc_info)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Return a ``CorrelationLogger`` for a module.

    Args:
        name: Module name, usually ``__name__``
        correlation_id: Run identifier, if the caller has one
        component: Component name; defaults to the last part of ``name``
    """
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(
    program: str,
    stream: Optional[TextIO] = None,
    level: int = logging.WARNING,
) -> logging.Handler:
    """Install the diagnostic handler on the package logger.

    Every record is rendered as ``<program>: <message>``. Calling this again
    replaces the handler installed by a previous call, so repeated runs in one
    process never duplicate output.

    Args:
        program: Program name used as the line prefix
        stream: Text stream to write to (defaults to the current ``sys.stderr``)
        level: Minimum level emitted by the package logger

    Returns:
        The installed handler
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(HANDLER_NAME)
    prefix = program.replace("%", "%%")
    handler.setFormatter(logging.Formatter(f"{prefix}: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
