# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Document store interface."""


# type annotations
from __future__ import annotations
from typing import Dict, List, Any, Type, Optional

# standard libs
import uuid

# external libs
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session

# internal libs
from docfix.core.logging import Logger
from docfix.core.typing import Identifier, Scalar
from docfix.model import Model, ID_FIELD, LABEL_FIELD
from docfix.store.core import StoreFailure, StoreError, NotFound, ValidationError, to_json, from_json
from docfix.store.connection import ConnectionManager
from docfix.store.document import Document
from docfix.store.entity import Entity, DocumentRecord

# public interface
__all__ = ['DocumentStore', 'new_identifier', ]

# module logger
log = Logger.with_name(__name__)


def new_identifier() -> Identifier:
    """Random identifier in the 12-byte (24 hex digit) layout."""
    return uuid.uuid4().hex[:24]


class DocumentStore:
    """
    Persist documents of declared models.

    Every document is one row keyed by (collection, id) with its attributes
    stored as JSON. The label marker is mirrored into an indexed column.

    Example:
        >>> store = DocumentStore.memory()
        >>> document = store.new_document(User)
        >>> document['name'] = 'Alice'
        >>> store.save(document)
        True
    """

    session: scoped_session

    def __init__(self: DocumentStore, session: scoped_session) -> None:
        """Initialize with existing `session`."""
        self.session = session

    @classmethod
    def from_connection(cls: Type[DocumentStore], connection: ConnectionManager = None) -> DocumentStore:
        """Build store with session from `connection` (default from configuration)."""
        store = cls((connection or ConnectionManager.default()).session)
        store.create_all()
        return store

    @classmethod
    def memory(cls: Type[DocumentStore]) -> DocumentStore:
        """New store backed by a private in-memory database."""
        return cls.from_connection(ConnectionManager.memory())

    def create_all(self: DocumentStore) -> None:
        """Create all store objects (if not exists)."""
        Entity.metadata.create_all(self.session.get_bind())

    def drop_all(self: DocumentStore) -> None:
        """Drop all store objects."""
        log.info('Dropping all store objects')
        self.session.remove()
        Entity.metadata.drop_all(self.session.get_bind())

    def new_document(self: DocumentStore, model: Type[Model], identifier: Identifier = None) -> Document:
        """New unsaved document with `identifier` (random if not given)."""
        return Document(model, {ID_FIELD: identifier or new_identifier()}, new_record=True)

    def find_one(self: DocumentStore, model: Type[Model], filter: Dict[str, Scalar]) -> Optional[Document]:
        """First document of `model` matching all equality conditions in `filter` (or None)."""
        query = select(DocumentRecord).where(DocumentRecord.collection == model.collection)
        for field, value in filter.items():
            query = query.where(self._condition(field, value))
        record = self.session.execute(query.limit(1)).scalars().first()
        return None if record is None else self._to_document(model, record)

    def find(self: DocumentStore, model: Type[Model], identifier: Identifier) -> Document:
        """Document of `model` with `identifier`."""
        document = self.find_one(model, {ID_FIELD: identifier})
        if document is None:
            raise NotFound(f'No {model.collection} with {ID_FIELD}={identifier}')
        return document

    def find_all(self: DocumentStore, model: Type[Model]) -> List[Document]:
        """All documents of `model`."""
        query = select(DocumentRecord).where(DocumentRecord.collection == model.collection)
        return [self._to_document(model, record) for record in self.session.execute(query).scalars()]

    def count(self: DocumentStore, model: Type[Model]) -> int:
        """Count of documents of `model`."""
        query = (select(func.count()).select_from(DocumentRecord)
                 .where(DocumentRecord.collection == model.collection))
        return self.session.execute(query).scalar_one()

    def save(self: DocumentStore, document: Document, validate: bool = True) -> bool:
        """
        Write `document` (insert or update).

        Nothing is written if `validate` and the document violates its model (`ValidationError`).
        Any failure of the underlying database is raised as `StoreFailure`.
        """
        if validate:
            problems = document.model.validate(document.attributes)
            if problems:
                raise ValidationError(f'Invalid {document.model.__name__} ({document.id}): ' + '; '.join(problems))
        if document.id is None:
            document[ID_FIELD] = new_identifier()
        data = to_json({field: value for field, value in document.attributes.items() if field != ID_FIELD})
        try:
            record = self.session.get(DocumentRecord, (document.model.collection, document.id))
            if record is None:
                record = DocumentRecord(collection=document.model.collection, id=document.id)
                self.session.add(record)
            record.label = document.label
            record.data = data
            self.session.commit()
        except SQLAlchemyError as error:
            self.session.rollback()
            raise StoreFailure(f'Failed to save {document.model.__name__} ({document.id}): {error}') from error
        log.debug(f'Saved {document.model.collection} ({document.id})')
        document.mark_persisted()
        return True

    @staticmethod
    def _condition(field: str, value: Any) -> Any:
        """SQL condition for `field == value`."""
        if field == ID_FIELD:
            return DocumentRecord.id == value
        if field == LABEL_FIELD:
            return DocumentRecord.label == value
        element = DocumentRecord.data[field]
        if isinstance(value, bool):
            return element.as_boolean() == value
        if isinstance(value, int):
            return element.as_integer() == value
        if isinstance(value, float):
            return element.as_float() == value
        if isinstance(value, str):
            return element.as_string() == value
        raise StoreError(f'Unsupported filter value for \'{field}\': {value!r}')

    @staticmethod
    def _to_document(model: Type[Model], record: DocumentRecord) -> Document:
        """Build document from stored `record`."""
        return Document(model, {ID_FIELD: record.id, **from_json(record.data)}, new_record=False)
