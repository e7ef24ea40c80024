# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Fixtures for unit tests."""


# type annotations
from typing import Callable, Iterator

# standard libs
import os
from datetime import datetime, timezone

# external libs
import pytest

# internal libs
from docfix.store import DocumentStore
from tests.unit import models  # noqa: registers models


FIXTURES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'fixtures')
NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def fixtures_dir() -> str:
    """Directory of sample fixture files."""
    return FIXTURES_DIR


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Fixed time source."""
    return lambda: NOW


@pytest.fixture
def store() -> Iterator[DocumentStore]:
    """New store backed by a private in-memory database."""
    store = DocumentStore.memory()
    yield store
    store.session.remove()
