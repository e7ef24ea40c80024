# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Runtime configuration.

Sources are layered, later ones taking precedence: package defaults, the
preset for the chosen logging style, the system, user and project TOML
files, and finally DOCFIX_* environment variables (e.g., DOCFIX_STORE_FILE).
"""


# type annotations
from typing import Dict, Optional

# standard libs
import os
import sys
import functools

# external libs
from cmdkit.app import exit_status
from cmdkit.config import Namespace, Environ, Configuration, ConfigurationError

# internal libs
from docfix.core.platform import SITES, path, is_private
from docfix.core.exceptions import write_traceback

# public interface
__all__ = ['config', 'default', 'load', 'reload', 'read_file', 'read_env', 'blame', 'get_logging_style',
           'ConfigurationError', 'Namespace', 'Configuration', 'DEFAULT_LOGGING_STYLE', 'LOGGING_STYLES', ]


DEFAULT_LOGGING_STYLE = 'default'
LOGGING_STYLES = {
    'default': {
        'format': ('%(ansi_bold)s%(ansi_level)s%(levelname)8s%(ansi_reset)s '
                   '%(ansi_faint)s[%(name)s]%(ansi_reset)s %(message)s'),
        'datefmt': '%H:%M:%S',
    },
    'plain': {
        'format': '%(levelname)s [%(name)s] %(message)s',
        'datefmt': '%H:%M:%S',
    },
    'detailed': {
        'format': ('%(ansi_faint)s%(asctime)s.%(msecs)03d%(ansi_reset)s '
                   '%(ansi_bold)s%(ansi_level)s%(levelname)8s%(ansi_reset)s '
                   '%(ansi_faint)s[%(name)s:%(lineno)d]%(ansi_reset)s %(message)s'),
        'datefmt': '%Y-%m-%d %H:%M:%S',
    },
}


default = Namespace({
    'store': {
        # NOTE: fixtures are throwaway test data
        'provider': 'sqlite',
        'file': ':memory:',
        'echo': False,
    },
    'logging': {
        'level': 'warning',
        'style': DEFAULT_LOGGING_STYLE,
        **LOGGING_STYLES[DEFAULT_LOGGING_STYLE],
    },
    'fixtures': {
        'path': os.path.join('tests', 'fixtures'),
    },
})


def read_file(filepath: str) -> Namespace:
    """Contents of TOML file at `filepath` (empty if it does not exist)."""
    if not os.path.exists(filepath):
        return Namespace()
    try:
        contents = Namespace.from_toml(filepath)
    except Exception as error:
        raise ConfigurationError(f'(from file: {filepath}) {error.__class__.__name__}: {error}') from error
    if 'password' in contents.get('store', {}) and not is_private(filepath):
        raise ConfigurationError(f'Store password in file readable by others ({filepath})')
    return contents


def read_env() -> Environ:
    """DOCFIX_* environment variables expanded as a namespace."""
    return Environ(prefix='DOCFIX').expand()


read_file_once = functools.lru_cache(maxsize=None)(read_file)
read_env_once = functools.lru_cache(maxsize=None)(read_env)


def sources(fresh: bool = False) -> Dict[str, Namespace]:
    """Files and environment in order of increasing precedence."""
    from_file, from_env = (read_file, read_env) if fresh else (read_file_once, read_env_once)
    return {**{site: from_file(path[site].config) for site in SITES}, 'env': from_env()}


def blame(base: Configuration, *varpath: str) -> Optional[str]:
    """Where the value at `varpath` was defined (e.g., 'from: DOCFIX_LOGGING_LEVEL')."""
    source = base.which(*varpath)
    if not source:
        return None
    if source in SITES:
        return f'from: {path[source].config}'
    if source == 'env':
        return 'from: DOCFIX_' + '_'.join(node.upper() for node in varpath)
    return f'from: <{source}>'


def get_logging_style(base: Configuration) -> str:
    """Checked name of `logging.style`."""
    style = base.logging.style
    if not isinstance(style, str) or style.lower() not in LOGGING_STYLES:
        raise ConfigurationError(f'Unrecognized `logging.style` {style!r} ({blame(base, "logging", "style")})')
    return style.lower()


def assemble(fresh: bool = False) -> Configuration:
    """Layer all sources, the chosen logging style preset just above the defaults."""
    layers = sources(fresh)
    style = get_logging_style(Configuration(default=default, **layers))
    return Configuration(default=default, style=Namespace({'logging': LOGGING_STYLES[style]}), **layers)


def load() -> Configuration:
    """Configuration with files and environment read at most once."""
    return assemble()


def reload() -> Configuration:
    """Configuration with files and environment read again."""
    return assemble(fresh=True)


try:
    config = load()
except Exception as error:
    write_traceback(error, module=__name__)
    sys.exit(exit_status.bad_config)
