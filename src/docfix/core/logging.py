# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Logging setup.

All package loggers live under the 'docfix' logger, which writes to stderr
with the configured level and style. An extra TRACE level sits below DEBUG.
"""


# type annotations
from __future__ import annotations
from typing import Dict, Any

# standard libraries
import sys
import logging

# external libs
from cmdkit.app import exit_status
from cmdkit.config import ConfigurationError

# internal libs
from docfix.core.ansi import Ansi
from docfix.core.config import config, blame
from docfix.core.exceptions import write_traceback

# public interface
__all__ = ['Logger', 'StreamHandler', 'handler', 'level_from_name',
           'TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL', ]


TRACE: int = logging.DEBUG - 5
DEBUG: int = logging.DEBUG
INFO: int = logging.INFO
WARNING: int = logging.WARNING
ERROR: int = logging.ERROR
CRITICAL: int = logging.CRITICAL
logging.addLevelName(TRACE, 'TRACE')

LEVELS: Dict[str, int] = {logging.getLevelName(level): level
                          for level in (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)}

level_color: Dict[int, Ansi] = {
    TRACE: Ansi.CYAN,
    DEBUG: Ansi.BLUE,
    INFO: Ansi.GREEN,
    WARNING: Ansi.YELLOW,
    ERROR: Ansi.RED,
    CRITICAL: Ansi.MAGENTA,
}


class Logger(logging.Logger):
    """Logger with `trace` method."""

    def trace(self, msg: str, *args, **kwargs) -> None:
        """Log 'msg % args' with severity 'TRACE'."""
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    @classmethod
    def with_name(cls, name: str) -> Logger:
        """Shorthand for `log: Logger = logging.getLogger(name)`."""
        return logging.getLogger(name)


logging.setLoggerClass(Logger)


class LogRecord(logging.LogRecord):
    """LogRecord carrying ANSI codes for use in format strings (blank when not a terminal)."""

    color: bool = sys.stderr.isatty()

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        codes = {
            'ansi_level': level_color.get(self.levelno, Ansi.NULL),
            'ansi_reset': Ansi.RESET,
            'ansi_bold': Ansi.BOLD,
            'ansi_faint': Ansi.FAINT,
        }
        for name, code in codes.items():
            setattr(self, name, code.value if self.color else '')


logging.setLogRecordFactory(LogRecord)


class StreamHandler(logging.StreamHandler):
    """StreamHandler that exits when a record cannot be formatted."""

    def handleError(self, record: logging.LogRecord) -> None:
        """Bad format strings come from configuration."""
        write_traceback(sys.exc_info()[1], module=__name__)
        sys.exit(exit_status.bad_config)


def level_from_name(name: Any, source: str = 'logging.level') -> int:
    """Numeric level for `name` (case-insensitive)."""
    if isinstance(name, str) and name.upper() in LEVELS:
        return LEVELS[name.upper()]
    raise ConfigurationError(f'Unsupported logging level {name!r} ({blame(config, *source.split("."))})')


try:
    level = level_from_name(config.logging.level)
    handler = StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter(config.logging.format, datefmt=config.logging.datefmt))
except Exception as error:
    write_traceback(error, module=__name__)
    sys.exit(exit_status.bad_config)


package_logger = logging.getLogger('docfix')
package_logger.setLevel(level)
package_logger.addHandler(handler)
