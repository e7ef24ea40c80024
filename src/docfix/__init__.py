# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Label-based document fixtures for test suites.

Fixture files describe records by human-readable labels. The loader derives
stable identifiers from those labels, wires up relations between records,
and persists the resulting documents.
"""


# standard libs
import sys

# external libs
from rich.traceback import install as enable_rich_tracebacks

# internal libs (forced initialization)
from docfix.core.config import config
from docfix.core import logging

# public interface
__all__ = ['__appname__', '__version__', '__authors__', '__developer__', '__contact__',
           '__license__', '__website__', '__copyright__', '__description__',
           '__keywords__', ]

# project metadata
__appname__     = 'docfix'
__version__     = '0.4.0'
__authors__     = ['DocFix Team', ]
__developer__   = 'DocFix Team'
__contact__     = 'docfix@users.noreply.github.com'
__license__     = 'Apache License 2.0'
__website__     = 'https://github.com/docfix/docfix'
__copyright__   = 'DocFix Team 2022-2024'
__description__ = 'Label-based document fixtures for test suites.'
__keywords__    = 'testing fixtures documents yaml sqlalchemy'


# Enable rich tracebacks for interactive shells
if sys.stdout.isatty() and hasattr(sys, 'ps1'):
    enable_rich_tracebacks()
