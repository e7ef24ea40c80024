# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Resolve label references and inline records into foreign keys.

Each raw fixture record is rewritten against its model's relations:

    belongs-to                 label, "label (Type)", or inline mapping -> `<name>_id`
    has-many                   labels or inline mappings -> inverse key set on each related document
    has-and-belongs-to-many    labels or inline mappings -> identifier array on both sides
    embeds-one / embeds-many   left in place (sanitized when merged)

Resolution only reads from the store (to find existing documents by label).
The writes it requires are collected as operations on the `Resolution`.
"""


# type annotations
from __future__ import annotations
from typing import List, Dict, Any, Type, Optional, Tuple, Callable, Final

# standard libs
import re
from datetime import datetime, timezone
from dataclasses import dataclass, field

# internal libs
from docfix.core.logging import Logger
from docfix.core.typing import Label, Identifier, Attributes
from docfix.model import Model, Relation, RelationKind, UnknownModel, ID_FIELD, LABEL_FIELD
from docfix.store import DocumentStore, new_identifier
from docfix.fixtures.errors import FixtureDefinitionError
from docfix.fixtures.identity import identifier_for
from docfix.fixtures.operations import Operation, EnsureDocument, MergeLabeled, CreateDocument

# public interface
__all__ = ['RelationResolver', 'Resolution', 'parse_reference', 'utc_now', ]

# module logger
log = Logger.with_name(__name__)


Lookup = Callable[[Type[Model], Label], Optional[Identifier]]
Clock = Callable[[], datetime]


# Polymorphic type hint, e.g., "bob (Admin)"
REFERENCE_PATTERN: Final[re.Pattern] = re.compile(r'\s*\(([^)]*)\)\s*')


def parse_reference(value: str) -> Tuple[Label, Optional[str]]:
    """
    Split a label reference from its optional parenthetical type name.

    Example:
        >>> parse_reference('bob (Admin)')
        ('bob', 'Admin')
        >>> parse_reference('bob')
        ('bob', None)
    """
    match = REFERENCE_PATTERN.search(value)
    if match is None:
        return value, None
    return value[:match.start()] + value[match.end():], match.group(1)


def utc_now() -> datetime:
    """Current time (timezone aware)."""
    return datetime.now(timezone.utc)


def no_lookup(model: Type[Model], label: Label) -> Optional[Identifier]:
    """Default lookup assumes nothing exists yet."""
    return None


@dataclass
class Resolution:
    """Resolved attributes for one record and the operations it requires."""

    model: Type[Model]
    label: Optional[Label]
    attributes: Attributes
    operations: List[Operation] = field(default_factory=list)

    @property
    def identifier(self) -> Identifier:
        return self.attributes[ID_FIELD]

    def merge(self) -> Operation:
        """Operation writing the resolved attributes of the record itself."""
        if self.label is not None:
            return MergeLabeled(self.model, self.label, self.attributes)
        else:
            return CreateDocument(self.model, self.identifier, self.attributes)

    def plan(self) -> List[Operation]:
        """All operations for this record, the record's own merge last."""
        return [*self.operations, self.merge()]


class RelationResolver:
    """Rewrite relation-valued fields of raw fixture records."""

    lookup: Lookup
    clock: Clock

    def __init__(self: RelationResolver, lookup: Lookup = no_lookup, clock: Clock = utc_now) -> None:
        """Initialize with `lookup` to find identifiers of existing labeled documents."""
        self.lookup = lookup
        self.clock = clock
        self._strategies: Dict[RelationKind, Callable[[Relation, Resolution], None]] = {
            RelationKind.BELONGS_TO: self._resolve_belongs_to,
            RelationKind.HAS_MANY: self._resolve_has_many,
            RelationKind.HAS_AND_BELONGS_TO_MANY: self._resolve_has_and_belongs_to_many,
            RelationKind.EMBEDS_ONE: self._resolve_embedded,
            RelationKind.EMBEDS_MANY: self._resolve_embedded,
        }

    @classmethod
    def for_store(cls: Type[RelationResolver], store: DocumentStore, clock: Clock = utc_now) -> RelationResolver:
        """Resolver looking up existing documents in `store`."""

        def lookup(model: Type[Model], label: Label) -> Optional[Identifier]:
            document = store.find_one(model, {LABEL_FIELD: label})
            return None if document is None else document.id

        return cls(lookup, clock)

    def resolve(self: RelationResolver, label: Optional[Label], attributes: Attributes,
                model: Type[Model]) -> Resolution:
        """Resolve one record of `model` (anonymous if `label` is None)."""
        resolution = Resolution(model, label, dict(attributes))
        if label is not None:
            resolution.attributes[LABEL_FIELD] = label
        if ID_FIELD not in resolution.attributes:
            if label is not None:
                resolution.attributes[ID_FIELD] = self._reference(model, label, resolution)
            else:
                resolution.attributes[ID_FIELD] = new_identifier()
        self._set_timestamps(model, resolution.attributes)
        for relation in model.relations():
            self._strategies[relation.kind](relation, resolution)
        return resolution

    def _set_timestamps(self: RelationResolver, model: Type[Model], attributes: Attributes) -> None:
        """Apply the model's timestamp fields if not already present."""
        now = self.clock()
        for name in (model.timestamps.created_field, model.timestamps.updated_field):
            if name is not None and name not in attributes:
                attributes[name] = now

    def _resolve_belongs_to(self: RelationResolver, relation: Relation, resolution: Resolution) -> None:
        """Replace reference (label or inline mapping) with the foreign key."""
        value = resolution.attributes.pop(relation.name, None)
        if value is None:
            return
        if isinstance(value, dict):
            if relation.polymorphic:
                raise FixtureDefinitionError(f'Unable to create document from nested attributes in '
                                             f'polymorphic relation {self._describe(relation)}')
            target = self._target(relation)
            resolution.attributes[relation.foreign_key] = self._create_nested(target, value, resolution)
            return
        if isinstance(value, list):
            raise FixtureDefinitionError(f'Expected single reference for {self._describe(relation)}, found list')
        label, type_name = parse_reference(str(value)) if relation.polymorphic else (str(value), None)
        if type_name:
            resolution.attributes[relation.discriminator] = type_name
            target = self._model_named(type_name)
        else:
            target = self._target(relation)
        resolution.attributes[relation.foreign_key] = self._reference(target, label, resolution)
        log.trace(f'Resolved {self._describe(relation)} -> {target.__name__}({label})')

    def _resolve_has_many(self: RelationResolver, relation: Relation, resolution: Resolution) -> None:
        """Set the inverse key (and type) on every related document."""
        values = resolution.attributes.pop(relation.name, None)
        if values is None:
            return
        target = self._target(relation)
        for value in self._members(relation, values):
            inverse = {relation.foreign_key: resolution.identifier}
            if relation.polymorphic:
                inverse[relation.discriminator] = resolution.model.__name__
            if isinstance(value, dict):
                self._create_nested(target, {**value, **inverse}, resolution)
            else:
                resolution.operations.append(MergeLabeled(target, str(value), inverse))
            log.trace(f'Resolved {self._describe(relation)} -> {target.__name__}')

    def _resolve_has_and_belongs_to_many(self: RelationResolver, relation: Relation,
                                         resolution: Resolution) -> None:
        """Collect related identifiers on the owner and add the owner to each related document."""
        values = resolution.attributes.pop(relation.name, None)
        if values is None:
            return
        target = self._target(relation)
        identifiers = resolution.attributes[relation.foreign_key] = []
        for value in self._members(relation, values):
            inverse = {relation.inverse_foreign_key: [resolution.identifier, ]}
            if isinstance(value, dict):
                identifiers.append(self._create_nested(target, {**value, **inverse}, resolution))
            else:
                label = str(value)
                identifiers.append(self._identify(target, label))
                resolution.operations.append(MergeLabeled(target, label, inverse))
            log.trace(f'Resolved {self._describe(relation)} -> {target.__name__}({identifiers[-1]})')

    def _resolve_embedded(self: RelationResolver, relation: Relation, resolution: Resolution) -> None:
        """Embedded documents stay inline, they are sanitized by the merger."""

    def _create_nested(self: RelationResolver, model: Type[Model], attributes: Attributes,
                       resolution: Resolution) -> Identifier:
        """Resolve an inline record as a new anonymous document, return its identifier."""
        nested = self.resolve(None, attributes, model)
        resolution.operations.extend(nested.plan())
        return nested.identifier

    def _reference(self: RelationResolver, model: Type[Model], label: Label, resolution: Resolution) -> Identifier:
        """Identifier for `label`, requiring that a document exists for it."""
        resolution.operations.append(EnsureDocument(model, label))
        return self._identify(model, label)

    def _identify(self: RelationResolver, model: Type[Model], label: Label) -> Identifier:
        """Identifier of the existing document for `label`, else derived from the label."""
        return self.lookup(model, label) or identifier_for(label)

    def _target(self: RelationResolver, relation: Relation) -> Type[Model]:
        """Declared related model."""
        if relation.target is None:
            raise FixtureDefinitionError(f'Missing type for polymorphic reference {self._describe(relation)} '
                                         f'(expected "label (Type)")')
        return self._model_named(relation.target)

    @staticmethod
    def _model_named(name: str) -> Type[Model]:
        try:
            return Model.lookup(name)
        except UnknownModel as error:
            raise FixtureDefinitionError(str(error)) from error

    def _members(self: RelationResolver, relation: Relation, values: Any) -> List[Any]:
        if not isinstance(values, list):
            raise FixtureDefinitionError(f'Expected list for {self._describe(relation)}, '
                                         f'found {values.__class__.__name__}')
        return values

    @staticmethod
    def _describe(relation: Relation) -> str:
        return f'{relation.owner.__name__}.{relation.name}'
