# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""In-memory document with change tracking."""


# type annotations
from __future__ import annotations
from typing import Dict, Any, Type, Optional, Tuple, Iterator

# standard libs
import copy

# internal libs
from docfix.model import Model, ID_FIELD, LABEL_FIELD
from docfix.core.typing import Attributes, Identifier

# public interface
__all__ = ['Document', ]


class Document:
    """
    Attributes of one document of a given model.

    Changes are tracked relative to the attributes as of the last time the
    document was loaded from or written to the store.

    Example:
        >>> document = Document(User, {'_id': 'abc', 'name': 'Alice'}, new_record=False)
        >>> document['name'] = 'Alicia'
        >>> document.changes
        {'name': ('Alice', 'Alicia')}
    """

    model: Type[Model]
    attributes: Attributes
    new_record: bool

    def __init__(self: Document, model: Type[Model], attributes: Attributes = None, new_record: bool = True) -> None:
        """Direct initialization."""
        self.model = model
        self.attributes = dict(attributes or {})
        self.new_record = new_record
        self._persisted = {} if new_record else copy.deepcopy(self.attributes)

    def __repr__(self: Document) -> str:
        return f'<Document({self.model.__name__}, {self.id!r})>'

    def __getitem__(self: Document, field: str) -> Any:
        """Attribute value for `field` (None if absent)."""
        return self.attributes.get(field)

    def __setitem__(self: Document, field: str, value: Any) -> None:
        self.attributes[field] = value

    def __contains__(self: Document, field: str) -> bool:
        return field in self.attributes

    def __iter__(self: Document) -> Iterator[str]:
        return iter(list(self.attributes))

    def pop(self: Document, field: str, default: Any = None) -> Any:
        """Remove and return attribute `field`."""
        return self.attributes.pop(field, default)

    @property
    def id(self: Document) -> Optional[Identifier]:
        """Document identifier."""
        return self.attributes.get(ID_FIELD)

    @property
    def label(self: Document) -> Optional[str]:
        """Fixture label marker, if any."""
        return self.attributes.get(LABEL_FIELD)

    @property
    def changes(self: Document) -> Dict[str, Tuple[Any, Any]]:
        """Fields that differ from the persisted state as (old, new) pairs."""
        fields = list(self._persisted) + [field for field in self.attributes if field not in self._persisted]
        return {field: (self._persisted.get(field), self.attributes.get(field))
                for field in fields if self._persisted.get(field) != self.attributes.get(field)}

    def changed(self: Document, field: str) -> bool:
        """True if `field` was assigned a new non-null value since last persisted."""
        value = self.attributes.get(field)
        return value is not None and value != self._persisted.get(field)

    def mark_persisted(self: Document) -> None:
        """Reset change tracking after a successful write."""
        self._persisted = copy.deepcopy(self.attributes)
        self.new_record = False
