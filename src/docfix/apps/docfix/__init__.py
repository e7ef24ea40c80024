# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Entry-point for docfix command-line interface."""


# standard libs
import sys

# external libs
from cmdkit.app import Application, ApplicationGroup
from cmdkit.cli import Interface

# internal libs
from docfix import (__version__, __description__, __copyright__,
                    __developer__, __contact__, __website__)
from docfix.core.logging import Logger
from docfix.apps.docfix import load, show, config

# public interface
__all__ = ['DocFixApp', 'main', ]


PROGRAM = 'docfix'
USAGE = f"""\
usage: {PROGRAM} [-h] [-v] <command> [<args>...]
{__description__}\
"""

EPILOG = f"""\
Documentation and issue tracking at:
{__website__}

Copyright {__copyright__}
{__developer__} <{__contact__}>\
"""

HELP = f"""\
{USAGE}

commands:
load                   {load.__doc__}
show                   {show.__doc__}
config                 {config.__doc__}

options:
-h, --help             Show this message and exit.
-v, --version          Show the version and exit.

Use the -h/--help flag with the above commands to
learn more about their usage.

{EPILOG}\
"""


# initialize application logger
log = Logger.with_name('docfix')


# logging setup for command-line interface
Application.log_critical = log.critical
Application.log_exception = log.exception


class DocFixApp(ApplicationGroup):
    """Top-level application class for docfix."""

    interface = Interface(PROGRAM, USAGE, HELP)
    interface.add_argument('command')
    interface.add_argument('-v', '--version', action='version', version=__version__)

    command = None
    commands = {'load': load.LoadApp,
                'show': show.ShowApp,
                'config': config.ConfigApp,
                }


def main() -> int:
    """Entry-point for `docfix` console application."""
    return DocFixApp.main(sys.argv[1:])
