# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Read fixture files into label-keyed records."""


# type annotations
from __future__ import annotations
from typing import List, Dict, Any, Type, Optional, Final

# standard libs
import os
import json

# external libs
import yaml

# internal libs
from docfix.core.logging import Logger
from docfix.core.typing import Label, Attributes, Identifier
from docfix.model import Model, LABEL_FIELD
from docfix.store import Document, DocumentStore
from docfix.fixtures.errors import FixtureDefinitionError, FixtureNotFound, FixtureError
from docfix.fixtures.identity import identifier_for

# public interface
__all__ = ['Fixture', 'find_fixture_files', 'read_fixture_file', 'interpolate_label', 'parse_fixtures',
           'DEFAULTS_LABEL', 'LABEL_TOKEN', 'FIXTURE_EXTENSIONS', ]

# module logger
log = Logger.with_name(__name__)


DEFAULTS_LABEL: Final[str] = 'DEFAULTS'
LABEL_TOKEN: Final[str] = '$LABEL'
FIXTURE_EXTENSIONS: Final[List[str]] = ['.yml', '.yaml', '.json']


def find_fixture_files(path: str) -> List[str]:
    """
    All fixture files for the record-set at `path`.

    Files below the directory `path` (recursively, sorted) come first,
    followed by the top-level file `path` + extension if it exists.
    """
    found = []
    if os.path.isdir(path):
        for root, dirs, files in os.walk(path):
            dirs.sort()
            found.extend(os.path.join(root, name) for name in sorted(files)
                         if os.path.splitext(name)[1] in FIXTURE_EXTENSIONS)
    for extension in FIXTURE_EXTENSIONS:
        if os.path.isfile(path + extension):
            found.append(path + extension)
    return found


def read_fixture_file(filepath: str) -> Dict[Label, Attributes]:
    """Load label-keyed records from a YAML or JSON file."""
    with open(filepath, mode='r') as stream:
        try:
            if filepath.endswith('.json'):
                data = json.load(stream)
            else:
                data = yaml.safe_load(stream)
        except (yaml.YAMLError, json.JSONDecodeError) as error:
            raise FixtureDefinitionError(f'Failed to parse {filepath}: {error}') from error
    log.trace(f'Read {filepath}')
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FixtureDefinitionError(f'Expected mapping of labels to records in {filepath}, '
                                     f'found {data.__class__.__name__}')
    records = {}
    for label, attributes in data.items():
        if attributes is None:
            attributes = {}
        if not isinstance(attributes, dict):
            raise FixtureDefinitionError(f'Fixture \'{label}\' is not a mapping ({filepath})')
        records[str(label)] = attributes
    return records


def interpolate_label(label: Label, value: Any) -> Any:
    """
    Replace every occurrence of the label token within strings of `value`.

    Example:
        >>> interpolate_label('alice', {'email': '$LABEL@example.com', 'tags': ['$LABEL'], 'age': 3})
        {'email': 'alice@example.com', 'tags': ['alice'], 'age': 3}
    """
    if isinstance(value, str):
        return value.replace(LABEL_TOKEN, label)
    if isinstance(value, dict):
        return {key: interpolate_label(label, member) for key, member in value.items()}
    if isinstance(value, list):
        return [interpolate_label(label, member) for member in value]
    return value


class Fixture:
    """One labeled record of a fixture set (raw attributes, relations unresolved)."""

    label: Label
    attributes: Attributes
    model: Optional[Type[Model]]

    def __init__(self: Fixture, label: Label, attributes: Attributes, model: Type[Model] = None) -> None:
        """Direct initialization, interpolates the label into string values."""
        self.label = label
        self.attributes = interpolate_label(label, attributes)
        self.model = model

    def __repr__(self: Fixture) -> str:
        model = None if self.model is None else self.model.__name__
        return f'<Fixture({self.label!r}, model={model})>'

    def __getitem__(self: Fixture, field: str) -> Any:
        return self.attributes[field]

    def to_dict(self: Fixture) -> Attributes:
        """Copy of raw attributes."""
        return dict(self.attributes)

    @property
    def identifier(self: Fixture) -> Identifier:
        """Identifier derived from the label."""
        return identifier_for(self.label)

    def find(self: Fixture, store: DocumentStore) -> Document:
        """The persisted document for this fixture."""
        if self.model is None:
            raise FixtureError(f'No model for fixture \'{self.label}\'')
        document = store.find_one(self.model, {LABEL_FIELD: self.label})
        if document is None:
            raise FixtureNotFound(f'No {self.model.__name__} persisted for fixture \'{self.label}\'')
        return document


def parse_fixtures(path: str, model: Type[Model] = None) -> Dict[Label, Fixture]:
    """Read every fixture file for the record-set at `path` into one label space."""
    files = find_fixture_files(path)
    if not files:
        raise FixtureNotFound(f'No fixture files found for {path}')
    records = {}
    for filepath in files:
        records.update(read_fixture_file(filepath))
    records.pop(DEFAULTS_LABEL, None)
    return {label: Fixture(label, attributes, model) for label, attributes in records.items()}
