# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for reading fixture files."""


# standard libs
import os

# external libs
import pytest

# internal libs
from docfix.fixtures import (Fixture, FixtureDefinitionError, FixtureNotFound, FixtureError,
                             find_fixture_files, interpolate_label, parse_fixtures, identifier_for)
from docfix.fixtures.parser import read_fixture_file
from docfix.store import DocumentStore
from tests.unit.models import User


def write(path: str, content: str) -> str:
    """Write `content` to `path` (creating directories) and return it."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, mode='w') as stream:
        stream.write(content)
    return path


class TestFindFixtureFiles:
    """Unit tests for fixture file discovery."""

    def test_directory_then_file(self, fixtures_dir: str) -> None:
        """Files below the directory (sorted) come before the top-level file."""
        files = find_fixture_files(os.path.join(fixtures_dir, 'posts'))
        assert [os.path.relpath(path, fixtures_dir) for path in files] == [
            os.path.join('posts', '2023.yml'),
            os.path.join('posts', '2024.yml'),
            'posts.yml',
        ]

    def test_single_file(self, fixtures_dir: str) -> None:
        files = find_fixture_files(os.path.join(fixtures_dir, 'comments'))
        assert files == [os.path.join(fixtures_dir, 'comments.json')]

    def test_recursive(self, tmp_path) -> None:
        """Nested directories are searched, other extensions ignored."""
        base = str(tmp_path / 'users')
        write(os.path.join(base, 'b', 'one.yaml'), 'bob: {}')
        write(os.path.join(base, 'a.yml'), 'alice: {}')
        write(os.path.join(base, 'notes.txt'), 'ignored')
        files = find_fixture_files(base)
        assert [os.path.relpath(path, base) for path in files] == ['a.yml', os.path.join('b', 'one.yaml')]

    def test_missing(self, tmp_path) -> None:
        assert find_fixture_files(str(tmp_path / 'users')) == []


class TestReadFixtureFile:
    """Unit tests for reading one fixture file."""

    def test_yaml(self, fixtures_dir: str) -> None:
        """Merge keys apply defaults, labels are not yet interpolated."""
        records = read_fixture_file(os.path.join(fixtures_dir, 'users.yml'))
        assert list(records) == ['DEFAULTS', 'alice', 'carol']
        assert records['alice']['role'] == 'member'
        assert records['alice']['email'] == '$LABEL@example.com'

    def test_json(self, fixtures_dir: str) -> None:
        records = read_fixture_file(os.path.join(fixtures_dir, 'comments.json'))
        assert records['inline']['post']['title'] == 'Created inline'

    def test_empty(self, tmp_path) -> None:
        assert read_fixture_file(write(str(tmp_path / 'empty.yml'), '')) == {}

    def test_empty_record(self, tmp_path) -> None:
        assert read_fixture_file(write(str(tmp_path / 'users.yml'), 'alice:\n')) == {'alice': {}}

    def test_labels_are_strings(self, tmp_path) -> None:
        assert read_fixture_file(write(str(tmp_path / 'years.yml'), '2024: {name: x}\n')) == {'2024': {'name': 'x'}}

    def test_not_a_mapping(self, tmp_path) -> None:
        filepath = write(str(tmp_path / 'users.yml'), '- alice\n- bob\n')
        with pytest.raises(FixtureDefinitionError) as exc_info:
            read_fixture_file(filepath)
        response, = exc_info.value.args
        assert response == f'Expected mapping of labels to records in {filepath}, found list'

    def test_record_not_a_mapping(self, tmp_path) -> None:
        filepath = write(str(tmp_path / 'users.yml'), 'alice: Alice\n')
        with pytest.raises(FixtureDefinitionError) as exc_info:
            read_fixture_file(filepath)
        response, = exc_info.value.args
        assert response == f'Fixture \'alice\' is not a mapping ({filepath})'

    def test_malformed(self, tmp_path) -> None:
        with pytest.raises(FixtureDefinitionError):
            read_fixture_file(write(str(tmp_path / 'users.yml'), 'alice: {name: [}\n'))
        with pytest.raises(FixtureDefinitionError):
            read_fixture_file(write(str(tmp_path / 'users.json'), '{"alice": '))


class TestInterpolateLabel:
    """Unit tests for label interpolation."""

    def test_strings(self) -> None:
        assert interpolate_label('alice', '$LABEL@example.com') == 'alice@example.com'
        assert interpolate_label('alice', '$LABEL-$LABEL') == 'alice-alice'

    def test_nested(self) -> None:
        value = {'email': '$LABEL@example.com', 'tags': ['$LABEL', 1], 'address': {'city': '$LABEL-ville'}}
        assert interpolate_label('bob', value) == {
            'email': 'bob@example.com', 'tags': ['bob', 1], 'address': {'city': 'bob-ville'}}

    def test_other_values(self) -> None:
        assert interpolate_label('alice', 42) == 42
        assert interpolate_label('alice', None) is None


class TestParseFixtures:
    """Unit tests for reading a whole fixture set."""

    def test_defaults_removed(self, fixtures_dir: str) -> None:
        fixtures = parse_fixtures(os.path.join(fixtures_dir, 'users'), User)
        assert list(fixtures) == ['alice', 'carol']
        alice = fixtures['alice']
        assert alice.model is User
        assert alice['email'] == 'alice@example.com'
        assert alice['role'] == 'member'
        assert alice.identifier == identifier_for('alice')

    def test_later_files_win(self, fixtures_dir: str) -> None:
        """A label repeated in a later file replaces the earlier record."""
        fixtures = parse_fixtures(os.path.join(fixtures_dir, 'posts'))
        assert list(fixtures) == ['hello', 'draft', 'announcement']
        assert fixtures['draft'].to_dict() == {'title': 'Draft', 'author': 'carol'}

    def test_missing(self, tmp_path) -> None:
        with pytest.raises(FixtureNotFound):
            parse_fixtures(str(tmp_path / 'users'))


class TestFixture:
    """Unit tests for Fixture."""

    def test_repr(self) -> None:
        assert repr(Fixture('alice', {}, User)) == '<Fixture(\'alice\', model=User)>'
        assert repr(Fixture('alice', {})) == '<Fixture(\'alice\', model=None)>'

    def test_find_without_model(self, store: DocumentStore) -> None:
        with pytest.raises(FixtureError):
            Fixture('alice', {}).find(store)

    def test_find_not_persisted(self, store: DocumentStore) -> None:
        with pytest.raises(FixtureNotFound):
            Fixture('alice', {}, User).find(store)
