# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Show effective configuration."""


# type annotations
from __future__ import annotations
from typing import Any, Mapping, Optional

# standard libs
from functools import partial

# external libs
import toml
from cmdkit.app import Application, exit_status
from cmdkit.cli import Interface
from cmdkit.config import Configuration, ConfigurationError

# internal libs
from docfix.core import config as configuration
from docfix.core.exceptions import log_exception
from docfix.core.logging import Logger

# public interface
__all__ = ['ConfigApp', ]

# application logger
log = Logger.with_name('docfix')


PROGRAM = 'docfix config'
USAGE = f"""\
usage: {PROGRAM} [-h] [SECTION[.VAR]] [--blame]
{__doc__}\
"""

HELP = f"""\
{USAGE}

Values are merged from defaults, configuration files, and
DOCFIX_* environment variables (in that order of precedence).

arguments:
SECTION[.VAR]          Path to section or variable (default: all).

options:
-b, --blame            Show where the variable was defined.
-h, --help             Show this message and exit.\
"""


class ConfigApp(Application):
    """Application class for config entry-point."""

    interface = Interface(PROGRAM, USAGE, HELP)

    varpath: Optional[str] = None
    interface.add_argument('varpath', nargs='?', default=varpath, metavar='VAR')

    show_blame: bool = False
    interface.add_argument('-b', '--blame', action='store_true', dest='show_blame')

    exceptions = {
        ConfigurationError: partial(log_exception, logger=log.critical, status=exit_status.bad_config),
        **Application.exceptions,
    }

    def run(self: ConfigApp) -> None:
        """Business logic of command."""
        base = configuration.config
        if not self.varpath:
            print(toml.dumps(base.to_dict()).strip(), flush=True)
            return
        varpath = self.varpath.split('.')
        value = self.lookup(base, varpath)
        if isinstance(value, Mapping):
            print(toml.dumps({self.varpath: value}).strip(), flush=True)
            return
        if self.show_blame:
            print(f'{value} ({configuration.blame(base, *varpath)})', flush=True)
        else:
            print(value, flush=True)

    def lookup(self: ConfigApp, base: Configuration, varpath: list) -> Any:
        """Value or section at `varpath` within `base`."""
        value = base
        for name in varpath:
            if not isinstance(value, Mapping) or name not in value:
                raise ConfigurationError(f'No configuration for \'{self.varpath}\'')
            value = value[name]
        return value
