# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Pytest plugin providing a fixture loader against a private in-memory store.

Enable within a `conftest.py`:

    pytest_plugins = ['docfix.testing']

    def test_alice(fixture_loader):
        users, = fixture_loader(['users'])
        assert users['alice']['name'] == 'Alice'
"""


# type annotations
from __future__ import annotations
from typing import List, Iterable, Union, Mapping, Callable, Iterator

# standard libs
import os

# external libs
import pytest

# internal libs
from docfix.core.config import config
from docfix.store import DocumentStore
from docfix.fixtures.loader import FixtureLoader, FixtureCache, FixtureSet, ModelSpec

# public interface
__all__ = ['fixture_store', 'fixture_cache', 'fixture_loader', ]


LoadFixtures = Callable[..., List[FixtureSet]]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini('docfix_fixtures', help='Directory of fixture files', default=config.fixtures.path)


@pytest.fixture
def fixture_store() -> Iterator[DocumentStore]:
    """New document store backed by a private in-memory database."""
    store = DocumentStore.memory()
    yield store
    store.session.remove()


@pytest.fixture
def fixture_cache() -> FixtureCache:
    """Empty fixture cache."""
    return FixtureCache()


@pytest.fixture
def fixture_loader(request: pytest.FixtureRequest, fixture_store: DocumentStore,
                   fixture_cache: FixtureCache) -> LoadFixtures:
    """Load named fixture sets from the configured directory into `fixture_store`."""
    loader = FixtureLoader(fixture_store, fixture_cache)
    # NOTE: relative paths are taken from the pytest root directory
    directory = os.path.join(str(request.config.rootpath), request.config.getini('docfix_fixtures'))

    def load(names: Union[str, Iterable[str]], models: Mapping[str, ModelSpec] = None) -> List[FixtureSet]:
        return loader.load(directory, names, models)

    return load
