# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for in-memory documents."""


# internal libs
from docfix.store import Document
from tests.unit.models import User


class TestDocument:
    """Unit tests for Document change tracking."""

    def test_item_access(self) -> None:
        document = Document(User, {'_id': 'abc', 'name': 'Alice'})
        assert document.id == 'abc'
        assert document['name'] == 'Alice'
        assert document['missing'] is None
        assert 'name' in document and 'missing' not in document
        assert list(document) == ['_id', 'name']
        assert document.pop('name') == 'Alice'
        assert 'name' not in document

    def test_label(self) -> None:
        document = Document(User, {'__fixture_name': 'alice'})
        assert document.label == 'alice'
        assert Document(User).label is None

    def test_new_record_changes(self) -> None:
        """Everything assigned to a new document is a change."""
        document = Document(User, {'_id': 'abc', 'name': 'Alice'})
        assert document.new_record
        assert document.changes == {'_id': (None, 'abc'), 'name': (None, 'Alice')}
        assert document.changed('name')

    def test_persisted_changes(self) -> None:
        """Changes are relative to the persisted state."""
        document = Document(User, {'_id': 'abc', 'name': 'Alice'}, new_record=False)
        assert document.changes == {}
        document['name'] = 'Alicia'
        document['role'] = 'admin'
        assert document.changes == {'name': ('Alice', 'Alicia'), 'role': (None, 'admin')}
        assert document.changed('name') and document.changed('role')
        assert not document.changed('_id')

    def test_removed_value_is_not_changed(self) -> None:
        """A field set to None is a change but was not assigned a new value."""
        document = Document(User, {'_id': 'abc', 'name': 'Alice'}, new_record=False)
        document['name'] = None
        assert document.changes == {'name': ('Alice', None)}
        assert not document.changed('name')

    def test_mark_persisted(self) -> None:
        document = Document(User, {'_id': 'abc', 'tags': ['a']})
        document.mark_persisted()
        assert not document.new_record
        assert document.changes == {}
        document['tags'].append('b')
        assert document.changes == {'tags': (['a'], ['a', 'b'])}
