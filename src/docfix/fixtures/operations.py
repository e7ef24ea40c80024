# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""
Document operations produced by relation resolution.

Resolution never writes to the store. It describes the writes it requires
as a list of operations which are then applied, in order, by a merger.
"""


# type annotations
from __future__ import annotations
from typing import Type, TYPE_CHECKING

# standard libs
from abc import ABC, abstractmethod
from dataclasses import dataclass

# internal libs
from docfix.core.typing import Label, Identifier, Attributes
from docfix.model import Model
from docfix.store import Document

if TYPE_CHECKING:
    from docfix.fixtures.merger import DocumentMerger

# public interface
__all__ = ['Operation', 'EnsureDocument', 'MergeLabeled', 'CreateDocument', ]


class Operation(ABC):
    """A single write required by a resolved fixture."""

    model: Type[Model]

    @abstractmethod
    def apply(self, merger: DocumentMerger) -> Document:
        """Carry out the operation, return the affected document."""


@dataclass(frozen=True)
class EnsureDocument(Operation):
    """Find the document for `label`, creating a placeholder if missing."""

    model: Type[Model]
    label: Label

    def apply(self, merger: DocumentMerger) -> Document:
        return merger.find_or_new(self.model, self.label)


@dataclass(frozen=True)
class MergeLabeled(Operation):
    """Merge `attributes` into the document for `label` (created if missing)."""

    model: Type[Model]
    label: Label
    attributes: Attributes

    def apply(self, merger: DocumentMerger) -> Document:
        return merger.merge(merger.find_or_new(self.model, self.label), self.attributes)


@dataclass(frozen=True)
class CreateDocument(Operation):
    """Merge `attributes` into a new anonymous document with `identifier`."""

    model: Type[Model]
    identifier: Identifier
    attributes: Attributes

    def apply(self, merger: DocumentMerger) -> Document:
        return merger.merge(merger.store.new_document(self.model, self.identifier), self.attributes)
