# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Show the parsed records of a fixture set."""


# type annotations
from __future__ import annotations
from typing import Callable, Dict, Optional

# standard libs
import os
import sys
import json
from functools import partial

# external libs
import yaml
from cmdkit.app import Application, exit_status
from cmdkit.cli import Interface
from rich.console import Console
from rich.syntax import Syntax

# internal libs
from docfix.core.config import config
from docfix.core.exceptions import log_exception
from docfix.core.logging import Logger
from docfix.core.typing import Label, Attributes
from docfix.model import ID_FIELD
from docfix.fixtures import (parse_fixtures, Fixture,
                             FixtureError, FixtureDefinitionError, FixtureNotFound)

# public interface
__all__ = ['ShowApp', ]

# application logger
log = Logger.with_name('docfix')


PROGRAM = 'docfix show'
USAGE = f"""\
usage: {PROGRAM} [-h] NAME [--label LABEL] [--ids] [--path DIR] [--json]
{__doc__}\
"""

HELP = f"""\
{USAGE}

Records are shown as read (labels interpolated, DEFAULTS removed)
with relations unresolved.

arguments:
NAME                   Name of fixture set (e.g., users).

options:
-l, --label    LABEL   Only show this record.
    --ids              Include the identifier derived from each label.
-p, --path     DIR     Fixture directory (default: {config.fixtures.path}).
    --json             Format output as JSON.
-h, --help             Show this message and exit.\
"""


formatters: Dict[str, Callable[[dict], str]] = {
    'yaml': partial(yaml.safe_dump, indent=4, sort_keys=False),
    'json': partial(json.dumps, indent=4, default=str),
}


class ShowApp(Application):
    """Application class for fixture show entry-point."""

    interface = Interface(PROGRAM, USAGE, HELP)

    name: str
    interface.add_argument('name')

    label: Optional[Label] = None
    interface.add_argument('-l', '--label', default=label)

    with_ids: bool = False
    interface.add_argument('--ids', action='store_true', dest='with_ids')

    path: str = config.fixtures.path
    interface.add_argument('-p', '--path', default=path)

    format_json: bool = False
    interface.add_argument('--json', action='store_true', dest='format_json')

    exceptions = {
        **{error: partial(log_exception, logger=log.critical, status=exit_status.runtime_error)
           for error in (FixtureError, FixtureDefinitionError, FixtureNotFound)},
        **Application.exceptions,
    }

    def run(self: ShowApp) -> None:
        """Business logic of command."""
        fixtures = parse_fixtures(os.path.join(self.path, self.name))
        if self.label is not None:
            if self.label not in fixtures:
                raise FixtureNotFound(f'No fixture \'{self.label}\' in {self.name}')
            fixtures = {self.label: fixtures[self.label]}
        self.write({label: self.format_record(fixture) for label, fixture in fixtures.items()})

    def format_record(self: ShowApp, fixture: Fixture) -> Attributes:
        """Record attributes, led by the derived identifier if requested."""
        if not self.with_ids:
            return fixture.to_dict()
        return {ID_FIELD: fixture.identifier, **fixture.to_dict()}

    def write(self: ShowApp, data: dict) -> None:
        """Print `data` (highlighted on a terminal)."""
        style = 'json' if self.format_json else 'yaml'
        output = formatters[style](data)
        if not sys.stdout.isatty():
            print(output, file=sys.stdout, flush=True)
            return
        Console().print(Syntax(output, style, word_wrap=True, theme='solarized-dark', background_color='default'))
