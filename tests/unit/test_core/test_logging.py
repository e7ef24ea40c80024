# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for logging setup."""


# standard libs
import logging

# external libs
import pytest
from cmdkit.config import ConfigurationError

# internal libs
from docfix.core.logging import Logger, level_from_name, TRACE, DEBUG, CRITICAL


@pytest.mark.parametrize('name, level', [('trace', TRACE), ('DEBUG', DEBUG), ('Critical', CRITICAL)])
def test_level_from_name(name: str, level: int) -> None:
    assert level_from_name(name) == level


@pytest.mark.parametrize('name', ['verbose', 10, None])
def test_level_from_name_unsupported(name) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        level_from_name(name)
    assert str(exc_info.value).startswith(f'Unsupported logging level {name!r}')


def test_trace(caplog: pytest.LogCaptureFixture) -> None:
    """Package loggers have a TRACE level below DEBUG."""
    log = Logger.with_name('docfix.test')
    with caplog.at_level(TRACE, logger='docfix'):
        log.trace('hello')
    assert ('docfix.test', TRACE, 'hello') in caplog.record_tuples
    assert logging.getLevelName(TRACE) == 'TRACE'
