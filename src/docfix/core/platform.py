# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Locations of configuration files and logs."""


# standard libs
import os
import stat

# external libs
from cmdkit.config import Namespace

# public interface
__all__ = ['SITES', 'path', 'default_path', 'is_private', ]


# Configuration files, in order of increasing precedence
SITES = ('system', 'user', 'local')

home = os.path.expanduser('~')
is_root = hasattr(os, 'getuid') and os.getuid() == 0

path = Namespace({
    'system': {
        'config': '/etc/docfix.toml',
        'log': '/var/log/docfix',
    },
    'user': {
        'config': os.path.join(home, '.docfix', 'config.toml'),
        'log': os.path.join(home, '.docfix', 'log'),
    },
    'local': {
        'config': os.path.join(os.getcwd(), '.docfix.toml'),
        'log': os.path.join(os.getcwd(), '.docfix', 'log'),
    },
})

# NOTE: log directories are only created when a traceback is written
default_path = path.system if is_root else path.user


def is_private(filepath: str) -> bool:
    """True if neither group nor others have any access to `filepath`."""
    return not os.stat(filepath).st_mode & (stat.S_IRWXG | stat.S_IRWXO)
