# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for loading fixture sets."""


# type annotations
from typing import Callable

# standard libs
import os
import logging
from datetime import datetime, date

# external libs
import pytest

# internal libs
from docfix.store import DocumentStore
from docfix.fixtures import (FixtureLoader, FixtureCache, FixtureSet, ModelMap, FixtureNotFound,
                             FixtureDefinitionError, identifier_for)
from docfix.fixtures import loader as loader_module
from tests.unit.models import User, Group, Tag, Admin, Note, Post, Comment, Company
from tests.unit.conftest import FIXTURES_DIR


@pytest.fixture
def cache() -> FixtureCache:
    """Empty cache."""
    return FixtureCache()


@pytest.fixture
def loader(store: DocumentStore, cache: FixtureCache, clock: Callable[[], datetime]) -> FixtureLoader:
    """Loader writing to a fresh store with a fresh cache."""
    return FixtureLoader(store, cache, clock)


def forbid_writes(store: DocumentStore, monkeypatch: pytest.MonkeyPatch) -> None:
    """Any attempt to write to `store` fails the test."""

    def save(*args, **kwargs) -> bool:
        raise AssertionError('Unexpected write to store')

    monkeypatch.setattr(store, 'save', save)


class TestModelMap:
    """Unit tests for fixture set to model mapping."""

    def test_default_name(self) -> None:
        assert ModelMap().name_for('users') == 'User'
        assert ModelMap().name_for('categories') == 'Category'
        assert ModelMap().name_for('admin/users') == 'User'

    def test_default_model(self) -> None:
        assert ModelMap()['users'] is User
        assert ModelMap()['widgets'] is None

    def test_overrides(self) -> None:
        models = ModelMap({'staff': User, 'teams': 'Group', 'robots': 'Robot'})
        assert models['staff'] is User
        assert models['teams'] is Group
        assert models.name_for('staff') == 'User'
        assert models['robots'] is None


class TestFixtureSet:
    """Unit tests for FixtureSet."""

    def test_mapping(self, fixtures_dir: str) -> None:
        users = FixtureSet('users', User, os.path.join(fixtures_dir, 'users'))
        assert len(users) == 2
        assert list(users) == users.labels == ['alice', 'carol']
        assert 'alice' in users
        assert users['alice']['name'] == 'Alice'
        assert users.identifier('alice') == identifier_for('alice')
        assert repr(users) == '<FixtureSet(\'users\', model=User, size=2)>'

    def test_missing_label(self, fixtures_dir: str) -> None:
        users = FixtureSet('users', User, os.path.join(fixtures_dir, 'users'))
        with pytest.raises(FixtureNotFound) as exc_info:
            users['zoe']
        response, = exc_info.value.args
        assert response == 'No fixture \'zoe\' in users'


class TestFixtureCache:
    """Unit tests for FixtureCache."""

    def test_lifecycle(self, fixtures_dir: str, cache: FixtureCache) -> None:
        users = FixtureSet('users', User, os.path.join(fixtures_dir, 'users'))
        assert cache.cache_empty
        cache.register({'users': users})
        assert not cache.is_loaded('users')
        cache.update({'users': users})
        assert cache.is_loaded('users')
        assert cache.cached(['users', 'groups']) == [users]
        assert cache.cached() == [users]
        cache.clear()
        assert cache.cache_empty
        assert not cache.is_loaded('users')
        assert cache.all_loaded == {'users': users}


class TestLoad:
    """Loading fixture sets into a store."""

    def test_users_and_groups(self, loader: FixtureLoader, store: DocumentStore) -> None:
        """Has-many labels set the inverse key on the referenced documents."""
        users, groups = loader.load(FIXTURES_DIR, ['users', 'groups'])
        assert users.model is User and groups.model is Group
        alice = users['alice'].find(store)
        admins = groups['admins'].find(store)
        assert alice.id == identifier_for('alice')
        assert admins['name'] == 'Admins'
        assert alice['group_id'] == admins.id
        assert store.count(User) == 2
        assert store.count(Group) == 1

    def test_groups_before_users(self, loader: FixtureLoader, store: DocumentStore) -> None:
        """Referenced documents are created first and completed when their own set loads."""
        loader.load(FIXTURES_DIR, ['groups'])
        placeholder = store.find(User, identifier_for('alice'))
        assert placeholder['group_id'] == identifier_for('admins')
        assert placeholder['name'] is None
        loader.load(FIXTURES_DIR, ['users'])
        alice = store.find(User, identifier_for('alice'))
        assert alice['name'] == 'Alice'
        assert alice['group_id'] == identifier_for('admins')
        assert store.count(User) == 2

    def test_attributes(self, loader: FixtureLoader, store: DocumentStore) -> None:
        """Labels are interpolated, defaults applied, and embedded defaults stripped."""
        users, = loader.load(FIXTURES_DIR, 'users')
        alice = users['alice'].find(store)
        assert alice['email'] == 'alice@example.com'
        assert alice['role'] == 'member'
        assert alice['address'] == {'city': 'Paris'}
        assert alice['phones'] == [{'number': '555-0100'}, {'number': '555-0101', 'kind': 'home'}]
        assert store.find_one(User, {'__fixture_name': 'DEFAULTS'}) is None

    def test_has_and_belongs_to_many(self, loader: FixtureLoader, store: DocumentStore) -> None:
        users, = loader.load(FIXTURES_DIR, ['users'])
        carol = users['carol'].find(store)
        python = store.find(Tag, identifier_for('python'))
        testing = store.find_one(Tag, {'name': 'testing'})
        assert carol['tag_ids'] == [python.id, testing.id]
        assert python['user_ids'] == [carol.id]
        assert testing['user_ids'] == [carol.id]
        assert testing.label is None

    def test_cache_skip(self, loader: FixtureLoader, store: DocumentStore, monkeypatch: pytest.MonkeyPatch) -> None:
        """A cached set is returned without reading files or writing to the store."""
        first = loader.load(FIXTURES_DIR, ['users', 'groups'])
        forbid_writes(store, monkeypatch)
        monkeypatch.setattr(loader_module, 'parse_fixtures', None)
        second = loader.load(FIXTURES_DIR, ['users', 'groups'])
        assert [a is b for a, b in zip(first, second)] == [True, True]

    def test_requested_order(self, loader: FixtureLoader) -> None:
        """Cached and newly loaded sets are returned in the requested order."""
        users, = loader.load(FIXTURES_DIR, ['users'])
        groups, cached_users = loader.load(FIXTURES_DIR, ['groups', 'users'])
        assert groups.name == 'groups'
        assert cached_users is users

    def test_polymorphic(self, loader: FixtureLoader, store: DocumentStore) -> None:
        notes, admins = loader.load(FIXTURES_DIR, ['notes', 'admins'])
        welcome = notes['welcome'].find(store)
        bob = admins['bob'].find(store)
        assert welcome['author_type'] == 'Admin'
        assert welcome['author_id'] == bob.id == identifier_for('bob')
        assert bob['name'] == 'Bob'
        assert store.count(Note) == 1
        assert store.count(Admin) == 1

    def test_timestamps(self, loader: FixtureLoader, store: DocumentStore, clock: Callable[[], datetime]) -> None:
        notes, = loader.load(FIXTURES_DIR, ['notes'])
        welcome = notes['welcome'].find(store)
        assert welcome['c_at'] == clock()
        assert welcome['u_at'] == clock()

    def test_directory(self, loader: FixtureLoader, store: DocumentStore) -> None:
        """All files of a set share one label space."""
        posts, = loader.load(FIXTURES_DIR, ['posts'])
        assert posts.labels == ['hello', 'draft', 'announcement']
        assert store.count(Post) == 3
        draft = posts['draft'].find(store)
        assert draft['title'] == 'Draft'
        assert draft['author_id'] == identifier_for('carol')
        assert store.find_one(User, {'__fixture_name': 'carol'}) is not None
        first = store.find_one(Comment, {'body': 'First!'})
        assert first['post_id'] == identifier_for('hello')

    def test_inline_belongs_to(self, loader: FixtureLoader, store: DocumentStore) -> None:
        """An inline record is created as a new anonymous document."""
        comments, = loader.load(FIXTURES_DIR, ['comments'])
        inline = comments['inline'].find(store)
        post = store.find(Post, inline['post_id'])
        assert post['title'] == 'Created inline'
        assert post.label is None
        reply = store.find_one(Comment, {'body': 'Reply'})
        assert reply['post_id'] == post.id
        assert store.count(Comment) == 2

    def test_no_model(self, loader: FixtureLoader, store: DocumentStore, caplog: pytest.LogCaptureFixture) -> None:
        """Sets without a model are parsed but not written."""
        with caplog.at_level(logging.WARNING, logger='docfix'):
            widgets, = loader.load(FIXTURES_DIR, ['widgets'])
        assert widgets.model is None
        assert widgets['gear']['size'] == 3
        assert 'No model for fixtures (widgets): parsed but not loaded' in caplog.messages
        assert loader.cache.is_loaded('widgets')

    def test_model_override(self, loader: FixtureLoader, store: DocumentStore, tmp_path) -> None:
        (tmp_path / 'staff.yml').write_text('dave:\n  name: Dave\n')
        (tmp_path / 'firms.yml').write_text('acme:\n  name: Acme\n')
        staff, firms = loader.load(str(tmp_path), ['staff', 'firms'], {'staff': User, 'firms': 'Company'})
        assert staff['dave'].find(store)['name'] == 'Dave'
        assert firms['acme'].find(store)['name'] == 'Acme'
        assert store.count(Company) == 1

    def test_dates_and_strings(self, loader: FixtureLoader, store: DocumentStore, tmp_path) -> None:
        """YAML dates and datetimes are read back with their type, quoted timestamps as strings."""
        (tmp_path / 'events.yml').write_text('launch:\n'
                                             '  name: Launch\n'
                                             '  at: 2024-01-01 10:00:00\n'
                                             '  day: 2024-02-03\n'
                                             '  note: "2024-01-02 03:04:05+00:00"\n')
        events, = loader.load(str(tmp_path), ['events'], {'events': Company})
        launch = events['launch'].find(store)
        assert launch['at'] == datetime(2024, 1, 1, 10, 0, 0)
        assert launch['day'] == date(2024, 2, 3)
        assert launch['note'] == '2024-01-02 03:04:05+00:00'

    def test_missing(self, loader: FixtureLoader) -> None:
        with pytest.raises(FixtureNotFound):
            loader.load(FIXTURES_DIR, ['users', 'missing'])
        assert not loader.cache.is_loaded('users')

    def test_registered_before_materialized(self, loader: FixtureLoader, tmp_path) -> None:
        """A failing set is registered as loaded but never cached."""
        (tmp_path / 'notes.yml').write_text('broken:\n  author:\n    name: Bob\n')
        with pytest.raises(FixtureDefinitionError):
            loader.load(str(tmp_path), ['notes'])
        assert 'notes' in loader.cache.all_loaded
        assert not loader.cache.is_loaded('notes')

    def test_identifiers_across_stores(self, clock: Callable[[], datetime]) -> None:
        """The same label resolves to the same identifier in separate loads."""
        ids = []
        for _ in range(2):
            store = DocumentStore.memory()
            users, = FixtureLoader(store, FixtureCache(), clock).load(FIXTURES_DIR, ['users'])
            ids.append(users['alice'].find(store).id)
            store.session.remove()
        assert ids[0] == ids[1] == identifier_for('alice')


class TestDefaultLoader:
    """Module-level interface using the configured store."""

    def test_load_fixtures(self) -> None:
        loader_module.reset_cache()
        try:
            users, = loader_module.load_fixtures(FIXTURES_DIR, ['users'])
            assert loader_module.is_cached('users')
            assert loader_module.cached(['users']) == [users]
            assert loader_module.load_fixtures(FIXTURES_DIR, 'users')[0] is users
        finally:
            loader_module.reset_cache()
        assert not loader_module.is_cached('users')
