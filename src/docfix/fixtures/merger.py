# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Merge resolved attributes into persisted documents."""


# type annotations
from __future__ import annotations
from typing import List, Any, Type, Iterable, Callable, Optional

# standard libs
import copy

# internal libs
from docfix.core.logging import Logger
from docfix.core.typing import Label, Attributes
from docfix.model import Model, Relation, RelationKind, UnknownModel, ID_FIELD, LABEL_FIELD
from docfix.store import Document, DocumentStore
from docfix.fixtures.errors import FixtureDefinitionError
from docfix.fixtures.identity import identifier_for
from docfix.fixtures.operations import Operation
from docfix.fixtures.resolver import parse_reference

# public interface
__all__ = ['DocumentMerger', 'merge_attributes', ]

# module logger
log = Logger.with_name(__name__)


def _as_list(value: Any) -> List[Any]:
    """Wrap non-list values (None is empty)."""
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value, ]


def _unique(*groups: Iterable[str]) -> List[str]:
    """Field names in order of first appearance."""
    return list(dict.fromkeys(name for group in groups for name in group))


def merge_attributes(document: Document, attributes: Attributes) -> Document:
    """
    Merge `attributes` into `document` in place (nothing is persisted).

    Arrays on either side are concatenated (new members first). Other values
    overwrite only if not None and not False. An existing identifier is kept.
    """
    attributes = copy.deepcopy(attributes)
    if document.id is not None:
        attributes.pop(ID_FIELD, None)
    for name in _unique(attributes, document):
        value, existing = attributes.get(name), document[name]
        if isinstance(value, list) or isinstance(existing, list):
            document[name] = _as_list(value) + _as_list(existing)
        elif value is not None and value is not False:
            document[name] = value
    return document


class DocumentMerger:
    """Write resolved fixtures to the store."""

    store: DocumentStore

    def __init__(self: DocumentMerger, store: DocumentStore) -> None:
        """Initialize with target `store`."""
        self.store = store

    def find_or_new(self: DocumentMerger, model: Type[Model], label: Label) -> Document:
        """Document for `label`, a placeholder is persisted if none exists."""
        document = self.store.find_one(model, {LABEL_FIELD: label})
        if document is None:
            document = self.store.new_document(model, identifier_for(label))
            document[LABEL_FIELD] = label
            self.store.save(document, validate=False)
            log.debug(f'Created {model.__name__} ({label}: {document.id})')
        return document

    def merge(self: DocumentMerger, document: Document, attributes: Attributes) -> Document:
        """Merge `attributes` into `document`, sanitize embedded documents, and persist."""
        merge_attributes(document, attributes)
        self.sanitize(document.model, document.attributes, changed=document.changed)
        self.store.save(document, validate=False)
        log.debug(f'Merged {document.model.__name__} ({document.label or document.id})')
        return document

    def execute(self: DocumentMerger, operations: Iterable[Operation]) -> List[Document]:
        """Apply `operations` in order."""
        return [operation.apply(self) for operation in operations]

    def sanitize(self: DocumentMerger, model: Type[Model], attributes: Attributes,
                 changed: Callable[[str], bool], embedded: bool = False) -> None:
        """
        Strip defaults from newly assigned embedded documents.

        Within an embedded document (`embedded`), belongs-to references given
        as labels are replaced by foreign keys.
        """
        for relation in model.relations():
            if relation.kind is RelationKind.EMBEDS_ONE:
                if changed(relation.name) and isinstance(attributes.get(relation.name), dict):
                    self._strip_defaults(self._model_named(relation.target), attributes[relation.name])
            elif relation.kind is RelationKind.EMBEDS_MANY:
                if changed(relation.name) and isinstance(attributes.get(relation.name), list):
                    target = self._model_named(relation.target)
                    for member in attributes[relation.name]:
                        if isinstance(member, dict):
                            self._strip_defaults(target, member)
            elif relation.kind is RelationKind.BELONGS_TO and embedded:
                self._resolve_embedded_reference(relation, attributes)

    def _strip_defaults(self: DocumentMerger, model: Type[Model], attributes: Attributes) -> None:
        """Remove identifier and every field equal to its declared default."""
        self.sanitize(model, attributes, changed=lambda name: attributes.get(name) is not None, embedded=True)
        attributes.pop(ID_FIELD, None)
        for name, default in model.defaults().items():
            if name != ID_FIELD and name in attributes and attributes[name] == default:
                del attributes[name]

    def _resolve_embedded_reference(self: DocumentMerger, relation: Relation, attributes: Attributes) -> None:
        """Replace a label reference within an embedded document by its foreign key."""
        value = attributes.pop(relation.name, None)
        if value is None:
            return
        if isinstance(value, (dict, list)):
            raise FixtureDefinitionError(f'Unable to create nested document inside an embedded document '
                                         f'({relation.owner.__name__}.{relation.name})')
        label, type_name = parse_reference(str(value)) if relation.polymorphic else (str(value), None)
        if type_name:
            attributes[relation.discriminator] = type_name
        target = self._model_named(type_name or relation.target)
        attributes[relation.foreign_key] = self.find_or_new(target, label).id

    @staticmethod
    def _model_named(name: Optional[str]) -> Type[Model]:
        if name is None:
            raise FixtureDefinitionError('Missing type for polymorphic reference (expected "label (Type)")')
        try:
            return Model.lookup(name)
        except UnknownModel as error:
            raise FixtureDefinitionError(str(error)) from error
