# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Reporting of errors that end the program."""


# type annotations
from typing import Callable, Optional

# standard libs
import os
import sys
import logging
import traceback
from datetime import datetime

# internal libs
from docfix.core.ansi import Ansi, colorize
from docfix.core.platform import default_path

# public interface
__all__ = ['one_line', 'dump_traceback', 'write_traceback', 'log_exception', ]


def one_line(exc: BaseException) -> str:
    """Exception as 'Name: message' on a single line."""
    return f'{exc.__class__.__name__}: ' + str(exc).replace('\n', ' - ')


def dump_traceback(exc: BaseException, site: str = None) -> str:
    """Write full traceback of `exc` into log directory `site`, return file path."""
    site = site or default_path.log
    os.makedirs(site, exist_ok=True)
    filepath = os.path.join(site, datetime.now().strftime('exception-%Y%m%d-%H%M%S.log'))
    with open(filepath, mode='w') as stream:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=stream)
    return filepath


def write_traceback(exc: BaseException, site: str = None, logger: logging.Logger = None,
                    status: int = None, module: str = None) -> Optional[int]:
    """Report `exc` and save its traceback to file, return `status`."""
    messages = [one_line(exc), f'Exception traceback written to {dump_traceback(exc, site)}']
    if logger is not None:
        for message in messages:
            logger.critical(message)
        return status
    # NOTE: logging may not be configured yet
    prefix = colorize('CRITICAL', Ansi.MAGENTA) + ('' if module is None else f' [{module}]')
    for message in messages:
        print(f'{prefix} {message}', file=sys.stderr)
    return status


def log_exception(exc: BaseException, logger: Callable[[str], None], status: int) -> int:
    """Log `exc` on one line and return `status`."""
    logger(one_line(exc))
    return status
