# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Document model declarations.

A `Model` subclass declares the schema of one collection of documents: its
fields (with defaults), its relations to other models, and its timestamp
convention. Models are never instantiated; the fixture machinery only reads
their metadata.

Example:
    >>> class User(Model):
    ...     timestamps = Timestamps(created='long', updated='long')
    ...     name = Field()
    ...     role = Field(default='member')
    ...     group = BelongsTo()
    ...     tags = HasAndBelongsToMany()
    ...     address = EmbedsOne()
"""


# type annotations
from __future__ import annotations
from typing import Dict, List, Type, Optional, Any, Callable, ClassVar, Union, Final

# standard libs
import re
import copy
from enum import Enum

# internal libs
from docfix.core.logging import Logger

# public interface
__all__ = ['ID_FIELD', 'LABEL_FIELD', 'ModelError', 'UnknownModel',
           'Model', 'Field', 'Timestamps', 'RelationKind', 'Relation',
           'BelongsTo', 'HasMany', 'HasAndBelongsToMany', 'EmbedsOne', 'EmbedsMany',
           'snake_case', 'camel_case', 'singularize', ]

# module logger
log = Logger.with_name(__name__)


# Reserved document fields
ID_FIELD: Final[str] = '_id'
LABEL_FIELD: Final[str] = '__fixture_name'


class ModelError(Exception):
    """Malformed model declaration or reference."""


class UnknownModel(ModelError):
    """No model is registered under the given name."""


def snake_case(name: str) -> str:
    """
    Convert "ClassName" to "class_name".

    Example:
        >>> snake_case('ContactAddress')
        'contact_address'
    """
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def camel_case(name: str) -> str:
    """
    Convert "relation_name" to "RelationName".

    Example:
        >>> camel_case('contact_address')
        'ContactAddress'
    """
    return ''.join(part[:1].upper() + part[1:] for part in re.split(r'[_\-\s]+', name) if part)


def singularize(name: str) -> str:
    """
    Naive English singular form for collection names.

    Example:
        >>> singularize('categories'), singularize('addresses'), singularize('users')
        ('category', 'address', 'user')
    """
    if name.endswith('ies') and len(name) > 3:
        return name[:-3] + 'y'
    if re.search(r'(ss|x|ch|sh)es$', name):
        return name[:-2]
    if name.endswith('s') and not name.endswith('ss'):
        return name[:-1]
    return name


class Field:
    """Declared field with an optional default value (or zero-argument callable)."""

    name: Optional[str] = None

    def __init__(self, default: Union[Any, Callable[[], Any]] = None, required: bool = False) -> None:
        """Direct initialization."""
        self.default = default
        self.required = required

    def __set_name__(self, owner: Type[Model], name: str) -> None:
        self.name = name

    def default_value(self) -> Any:
        """Resolved default for this field."""
        if callable(self.default):
            return self.default()
        else:
            return copy.deepcopy(self.default)

    def __repr__(self) -> str:
        return f'<Field({self.name}, default={self.default!r})>'


class RelationKind(Enum):
    """Closed set of supported relation kinds."""
    EMBEDS_ONE = 'embeds_one'
    EMBEDS_MANY = 'embeds_many'
    BELONGS_TO = 'belongs_to'
    HAS_MANY = 'has_many'
    HAS_AND_BELONGS_TO_MANY = 'has_and_belongs_to_many'


class Relation:
    """Base class for relation metadata, bound to its owning model by attribute name."""

    kind: ClassVar[RelationKind]

    name: str = None
    owner: Type[Model] = None

    def __init__(self, target: str = None, foreign_key: str = None, polymorphic: bool = False) -> None:
        """Direct initialization. Unspecified names follow the naming conventions."""
        self._target = target
        self._foreign_key = foreign_key
        self.polymorphic = polymorphic

    def __set_name__(self, owner: Type[Model], name: str) -> None:
        self.owner = owner
        self.name = name

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({self.owner.__name__}.{self.name} -> {self.target})>'

    @property
    def target(self) -> Optional[str]:
        """Name of the related model."""
        return self._target or camel_case(singularize(self.name))

    @property
    def target_model(self) -> Type[Model]:
        """The related model class (must be registered)."""
        return Model.lookup(self.target)

    @property
    def foreign_key(self) -> Optional[str]:
        """Field holding the reference (on the owner or the related model depending on kind)."""
        return self._foreign_key

    @property
    def inverse_foreign_key(self) -> Optional[str]:
        """Field on the related model holding references back to the owner."""
        return None

    @property
    def discriminator(self) -> Optional[str]:
        """Field holding the type name of a polymorphic reference."""
        return None


class BelongsTo(Relation):
    """The owner stores the identifier of one related document."""

    kind = RelationKind.BELONGS_TO

    @property
    def target(self) -> Optional[str]:
        if self._target:
            return self._target
        return None if self.polymorphic else camel_case(self.name)

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or f'{self.name}_id'

    @property
    def discriminator(self) -> Optional[str]:
        return f'{self.name}_type' if self.polymorphic else None


class HasMany(Relation):
    """Related documents store the identifier of the owner (optionally polymorphic with `as_`)."""

    kind = RelationKind.HAS_MANY

    def __init__(self, target: str = None, as_: str = None, foreign_key: str = None) -> None:
        """Direct initialization. Providing `as_` declares the inverse side of a polymorphic belongs-to."""
        super().__init__(target=target, foreign_key=foreign_key, polymorphic=as_ is not None)
        self.as_ = as_

    @property
    def foreign_key(self) -> str:
        if self._foreign_key:
            return self._foreign_key
        return f'{self.as_}_id' if self.polymorphic else f'{snake_case(self.owner.__name__)}_id'

    @property
    def discriminator(self) -> Optional[str]:
        return f'{self.as_}_type' if self.polymorphic else None


class HasAndBelongsToMany(Relation):
    """Both sides store arrays of identifiers of the other."""

    kind = RelationKind.HAS_AND_BELONGS_TO_MANY

    def __init__(self, target: str = None, foreign_key: str = None, inverse_foreign_key: str = None) -> None:
        """Direct initialization."""
        super().__init__(target=target, foreign_key=foreign_key)
        self._inverse_foreign_key = inverse_foreign_key

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or f'{singularize(self.name)}_ids'

    @property
    def inverse_foreign_key(self) -> str:
        return self._inverse_foreign_key or f'{snake_case(self.owner.__name__)}_ids'


class EmbedsOne(Relation):
    """One sub-document stored inline under the relation name."""

    kind = RelationKind.EMBEDS_ONE

    @property
    def target(self) -> str:
        return self._target or camel_case(self.name)


class EmbedsMany(Relation):
    """An array of sub-documents stored inline under the relation name."""

    kind = RelationKind.EMBEDS_MANY


class Timestamps:
    """
    Timestamp convention for a model.

    Each of `created` and `updated` may be None (no timestamp), 'short' (`c_at`, `u_at`),
    or 'long' (`created_at`, `updated_at`).
    """

    FIELDS: Final[Dict[str, Dict[str, str]]] = {
        'created': {'short': 'c_at', 'long': 'created_at'},
        'updated': {'short': 'u_at', 'long': 'updated_at'},
    }

    def __init__(self, created: str = None, updated: str = None) -> None:
        """Direct initialization."""
        for style in (created, updated):
            if style not in (None, 'short', 'long'):
                raise ModelError(f'Unsupported timestamp style \'{style}\'')
        self.created = created
        self.updated = updated

    @property
    def created_field(self) -> Optional[str]:
        """Field name for creation time, if any."""
        return None if self.created is None else self.FIELDS['created'][self.created]

    @property
    def updated_field(self) -> Optional[str]:
        """Field name for update time, if any."""
        return None if self.updated is None else self.FIELDS['updated'][self.updated]

    def __repr__(self) -> str:
        return f'<Timestamps(created={self.created!r}, updated={self.updated!r})>'


class Model:
    """Base class for document model declarations."""

    collection: ClassVar[str]
    timestamps: ClassVar[Timestamps] = Timestamps()

    registry: ClassVar[Dict[str, Type[Model]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if 'collection' not in cls.__dict__:
            cls.collection = snake_case(cls.__name__)
        if cls.__name__ in Model.registry and Model.registry[cls.__name__] is not cls:
            log.debug(f'Replacing registered model ({cls.__name__})')
        Model.registry[cls.__name__] = cls

    def __new__(cls, *args, **kwargs):
        raise ModelError(f'{cls.__name__} is a declaration and cannot be instantiated')

    @classmethod
    def lookup(cls, name: str) -> Type[Model]:
        """Registered model with `name`."""
        try:
            return Model.registry[name]
        except KeyError as error:
            raise UnknownModel(f'No model named \'{name}\'') from error

    @classmethod
    def get(cls, name: str) -> Optional[Type[Model]]:
        """Registered model with `name`, or None."""
        return Model.registry.get(name)

    @classmethod
    def _declared(cls, kind: type) -> List[Any]:
        """Members of type `kind` declared on this class and its bases (definition order)."""
        found = {}
        for base in reversed(cls.__mro__):
            for name, member in vars(base).items():
                if isinstance(member, kind):
                    found[name] = member
        return list(found.values())

    @classmethod
    def fields(cls) -> List[Field]:
        """Declared fields."""
        return cls._declared(Field)

    @classmethod
    def relations(cls) -> List[Relation]:
        """Declared relations."""
        return cls._declared(Relation)

    @classmethod
    def defaults(cls) -> Dict[str, Any]:
        """Default values of fields declaring one."""
        return {field.name: field.default_value() for field in cls.fields() if field.default is not None}

    @classmethod
    def validate(cls, attributes: Dict[str, Any]) -> List[str]:
        """List of problems with `attributes` (empty if valid)."""
        return [f'Missing required field \'{field.name}\'' for field in cls.fields()
                if field.required and attributes.get(field.name) is None]
