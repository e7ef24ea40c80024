# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Relational table holding persisted documents."""


# type annotations
from __future__ import annotations
from typing import Optional, Type

# standard libs
import re

# external libs
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, declared_attr, declarative_base
from sqlalchemy.dialects.postgresql import JSONB as SQLJSONB
from sqlalchemy.types import Text as SQLText, JSON as SQLJSON

# public interface
__all__ = ['Entity', 'DocumentRecord', ]


class EntityMixin:
    """Table naming and representation shared by store tables."""

    @declared_attr
    def __tablename__(cls: Type[Entity]) -> str:  # noqa: cls
        """DocumentRecord -> document_record."""
        return re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()

    def __repr__(self: Entity) -> str:
        keys = ', '.join(f'{column.name}={getattr(self, column.name)!r}' for column in self.__table__.primary_key)
        return f'<{self.__class__.__name__}({keys})>'


Entity = declarative_base(cls=EntityMixin)

# JSONB where available
TEXT = SQLText()
JSON = SQLJSON().with_variant(SQLJSONB(), 'postgresql')


class DocumentRecord(Entity):
    """
    One persisted document.

    Rows are keyed by (collection, id). The fixture label is copied out of
    the attributes into its own indexed column so label lookups stay cheap,
    everything else lives in `data`.
    """

    collection: Mapped[str] = mapped_column('collection', TEXT, primary_key=True, nullable=False)
    id: Mapped[str] = mapped_column('id', TEXT, primary_key=True, nullable=False)
    label: Mapped[Optional[str]] = mapped_column('label', TEXT, nullable=True)
    data: Mapped[dict] = mapped_column('data', JSON, nullable=False, default=dict)


Index('document_record_label_index', DocumentRecord.collection, DocumentRecord.label)
