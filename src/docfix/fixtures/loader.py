# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Load named fixture sets into a document store.

Example:
    >>> from docfix.fixtures import FixtureLoader
    >>> loader = FixtureLoader(DocumentStore.memory())
    >>> users, groups = loader.load('tests/fixtures', ['users', 'groups'])
    >>> users['alice'].find(loader.store)['name']
    'Alice'
"""


# type annotations
from __future__ import annotations
from typing import List, Dict, Type, Optional, Union, Iterable, Iterator, Mapping

# standard libs
import os

# internal libs
from docfix.core.logging import Logger
from docfix.core.typing import Label, Identifier
from docfix.model import Model, camel_case, singularize
from docfix.store import DocumentStore
from docfix.fixtures.errors import FixtureNotFound
from docfix.fixtures.identity import identifier_for
from docfix.fixtures.parser import Fixture, parse_fixtures
from docfix.fixtures.resolver import RelationResolver, Clock, utc_now
from docfix.fixtures.merger import DocumentMerger

# public interface
__all__ = ['FixtureSet', 'FixtureCache', 'ModelMap', 'FixtureLoader',
           'load_fixtures', 'reset_cache', 'is_cached', 'cached', 'default_cache', ]

# module logger
log = Logger.with_name(__name__)


ModelSpec = Union[str, Type[Model]]


class ModelMap:
    """
    Model type for each fixture set name.

    Explicit overrides (a model class or registered name) take precedence,
    otherwise the singular camel-cased base name of the set is used.

    Example:
        >>> ModelMap().name_for('admin/users')
        'User'
    """

    overrides: Dict[str, ModelSpec]

    def __init__(self: ModelMap, overrides: Mapping[str, ModelSpec] = None) -> None:
        """Initialize with optional `overrides`."""
        self.overrides = dict(overrides or {})

    @staticmethod
    def default_name(name: str) -> str:
        """Model name derived from fixture set `name`."""
        return camel_case(singularize(os.path.basename(name)))

    def name_for(self: ModelMap, name: str) -> str:
        """Model name for fixture set `name`."""
        model = self.overrides.get(name)
        if model is None:
            return self.default_name(name)
        return model if isinstance(model, str) else model.__name__

    def __getitem__(self: ModelMap, name: str) -> Optional[Type[Model]]:
        """Model for fixture set `name` (None if not registered)."""
        model = self.overrides.get(name)
        if isinstance(model, type):
            return model
        return Model.get(self.name_for(name))


class FixtureSet(Mapping[Label, Fixture]):
    """Read-only mapping of labels to fixtures for one named set."""

    name: str
    model: Optional[Type[Model]]
    path: str

    def __init__(self: FixtureSet, name: str, model: Optional[Type[Model]], path: str) -> None:
        """Read all fixture files at `path`."""
        self.name = name
        self.model = model
        self.path = path
        self._fixtures = parse_fixtures(path, model)

    def __repr__(self: FixtureSet) -> str:
        model = None if self.model is None else self.model.__name__
        return f'<FixtureSet({self.name!r}, model={model}, size={len(self)})>'

    def __getitem__(self: FixtureSet, label: Label) -> Fixture:
        try:
            return self._fixtures[label]
        except KeyError as error:
            raise FixtureNotFound(f'No fixture \'{label}\' in {self.name}') from error

    def __contains__(self: FixtureSet, label: object) -> bool:
        return label in self._fixtures

    def get(self: FixtureSet, label: Label, default: Fixture = None) -> Optional[Fixture]:
        """Fixture for `label` or `default`."""
        return self._fixtures.get(label, default)

    def __iter__(self: FixtureSet) -> Iterator[Label]:
        return iter(self._fixtures)

    def __len__(self: FixtureSet) -> int:
        return len(self._fixtures)

    @property
    def labels(self: FixtureSet) -> List[Label]:
        """Labels in definition order."""
        return list(self._fixtures)

    @staticmethod
    def identifier(label: Label) -> Identifier:
        """Identifier derived from `label`."""
        return identifier_for(label)


class FixtureCache:
    """Fixture sets by name, loaded at most once until cleared."""

    def __init__(self: FixtureCache) -> None:
        """Start empty."""
        self._cached: Dict[str, FixtureSet] = {}
        self.all_loaded: Dict[str, FixtureSet] = {}

    def __repr__(self: FixtureCache) -> str:
        return f'<FixtureCache({list(self._cached)})>'

    def is_loaded(self: FixtureCache, name: str) -> bool:
        """True if fixture set `name` is cached."""
        return name in self._cached

    @property
    def cache_empty(self: FixtureCache) -> bool:
        """True if nothing is cached."""
        return not self._cached

    def cached(self: FixtureCache, names: Iterable[str] = None) -> List[FixtureSet]:
        """Cached sets for `names` in the given order (all if not given)."""
        if names is None:
            return list(self._cached.values())
        return [self._cached[name] for name in names if name in self._cached]

    def register(self: FixtureCache, sets: Mapping[str, FixtureSet]) -> None:
        """Record `sets` as loaded (never cleared)."""
        self.all_loaded.update(sets)

    def update(self: FixtureCache, sets: Mapping[str, FixtureSet]) -> None:
        """Add `sets` to the cache."""
        self._cached.update(sets)

    def clear(self: FixtureCache) -> None:
        """Empty the cache (`all_loaded` is kept)."""
        self._cached.clear()


class FixtureLoader:
    """Parse, resolve, and persist fixture sets."""

    store: DocumentStore
    cache: FixtureCache

    def __init__(self: FixtureLoader, store: DocumentStore, cache: FixtureCache = None,
                 clock: Clock = utc_now) -> None:
        """Initialize with target `store` and `cache` (new if not given)."""
        self.store = store
        self.cache = cache if cache is not None else FixtureCache()
        self.clock = clock

    def load(self: FixtureLoader, directory: str, names: Union[str, Iterable[str]],
             models: Mapping[str, ModelSpec] = None) -> List[FixtureSet]:
        """
        Load fixture sets `names` from `directory`, return them in the requested order.

        Sets already cached are returned as is. The cache is only updated once
        every requested set has been written to the store.
        """
        names = [names, ] if isinstance(names, str) else [str(name) for name in names]
        models = ModelMap(models)
        for name in names:
            if self.cache.is_loaded(name):
                log.info(f'Using cached fixtures ({name})')
        pending = [name for name in names if not self.cache.is_loaded(name)]
        if not pending:
            return self.cache.cached(names)
        sets = {name: FixtureSet(name, models[name], os.path.join(directory, name)) for name in pending}
        self.cache.register(sets)
        for fixture_set in sets.values():
            self.materialize(fixture_set)
        self.cache.update(sets)
        return self.cache.cached(names)

    def materialize(self: FixtureLoader, fixture_set: FixtureSet) -> None:
        """Write every fixture in `fixture_set` to the store."""
        if fixture_set.model is None:
            log.warning(f'No model for fixtures ({fixture_set.name}): parsed but not loaded')
            return
        resolver = RelationResolver.for_store(self.store, clock=self.clock)
        merger = DocumentMerger(self.store)
        resolutions = []
        for label, fixture in fixture_set.items():
            resolution = resolver.resolve(label, fixture.attributes, fixture_set.model)
            merger.execute(resolution.operations)
            resolutions.append(resolution)
        merger.execute(resolution.merge() for resolution in resolutions)
        log.info(f'Loaded {len(fixture_set)} {fixture_set.model.__name__} fixtures ({fixture_set.name})')


default_cache = FixtureCache()
_default_loader: Optional[FixtureLoader] = None


def _loader() -> FixtureLoader:
    """Shared loader using the configured store and the default cache."""
    global _default_loader
    if _default_loader is None:
        _default_loader = FixtureLoader(DocumentStore.from_connection(), default_cache)
    return _default_loader


def load_fixtures(directory: str, names: Union[str, Iterable[str]],
                  models: Mapping[str, ModelSpec] = None) -> List[FixtureSet]:
    """Load fixture sets `names` from `directory` into the configured store."""
    return _loader().load(directory, names, models)


def reset_cache() -> None:
    """Empty the default fixture cache."""
    default_cache.clear()


def is_cached(name: str) -> bool:
    """True if fixture set `name` is in the default cache."""
    return default_cache.is_loaded(name)


def cached(names: Iterable[str] = None) -> List[FixtureSet]:
    """Fixture sets from the default cache."""
    return default_cache.cached(names)
