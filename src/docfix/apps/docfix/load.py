# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Load fixture sets into the configured store."""


# type annotations
from __future__ import annotations
from typing import List, Dict

# standard libs
import importlib
from functools import partial

# external libs
from cmdkit.app import Application, exit_status
from cmdkit.cli import Interface, ArgumentError

# internal libs
from docfix.core.config import config
from docfix.core.exceptions import log_exception
from docfix.core.logging import Logger
from docfix.store import DocumentStore, StoreError, StoreFailure
from docfix.fixtures import FixtureLoader, FixtureError, FixtureDefinitionError, FixtureNotFound

# public interface
__all__ = ['LoadApp', ]

# application logger
log = Logger.with_name('docfix')


PROGRAM = 'docfix load'
USAGE = f"""\
usage: {PROGRAM} [-h] NAME [NAME...] [--path DIR] [--model NAME=TYPE...] [--import MODULE...]
{__doc__}\
"""

HELP = f"""\
{USAGE}

Models must be registered before loading, use --import to name the
module(s) declaring them.

arguments:
NAME...                    Names of fixture sets (e.g., users).

options:
-p, --path         DIR     Fixture directory (default: {config.fixtures.path}).
-m, --model        SPEC    Model for a fixture set (e.g., admins=User).
-i, --import       MODULE  Import module declaring models.
-h, --help                 Show this message and exit.\
"""


class LoadApp(Application):
    """Application class for fixture load entry-point."""

    interface = Interface(PROGRAM, USAGE, HELP)

    names: List[str]
    interface.add_argument('names', nargs='+')

    path: str = config.fixtures.path
    interface.add_argument('-p', '--path', default=path)

    model_specs: List[str] = []
    interface.add_argument('-m', '--model', action='append', dest='model_specs', default=model_specs)

    modules: List[str] = []
    interface.add_argument('-i', '--import', action='append', dest='modules', default=modules)

    exceptions = {
        **{error: partial(log_exception, logger=log.critical, status=exit_status.runtime_error)
           for error in (FixtureError, FixtureDefinitionError, FixtureNotFound,
                         StoreError, StoreFailure, ModuleNotFoundError)},
        **Application.exceptions,
    }

    def run(self: LoadApp) -> None:
        """Business logic of command."""
        for module in self.modules:
            importlib.import_module(module)
        loader = FixtureLoader(DocumentStore.from_connection())
        for fixture_set in loader.load(self.path, self.names, self.models):
            model = 'no model' if fixture_set.model is None else fixture_set.model.__name__
            print(f'{fixture_set.name}: {len(fixture_set)} fixtures ({model})')

    @property
    def models(self: LoadApp) -> Dict[str, str]:
        """Model overrides by fixture set name."""
        models = {}
        for spec in self.model_specs:
            name, _, model = spec.partition('=')
            if not name or not model:
                raise ArgumentError(f'Expected NAME=TYPE for --model, found \'{spec}\'')
            models[name] = model
        return models
