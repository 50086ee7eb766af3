"""
Mapping strategy protocol.

An IndexMapping decides how each graph write becomes index mutations and
which index each entity kind lives in. Implementations compose a
DocumentBuilder instead of inheriting shared behavior.

Invariants:
    - Operations are independent: one call in, one action list out
    - Implementations hold only read-only configuration
    - get_index_for is stable for the lifetime of the mapping

How to change safely:
    - Protocol changes require updating all implementations
    - Changing index naming for an existing deployment requires a reindex
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..events.types import EntityKind, EntitySnapshot
from .actions import BulkAction

if TYPE_CHECKING:
    from ..config import MappingConfig


@runtime_checkable
class IndexMapping(Protocol):
    """Protocol for document mapping strategies.

    Create operations typically return one INDEX action and deletes one
    DELETE action keyed by the snapshot's key value. Updates may replace
    the whole document or send a partial update; that choice belongs to
    the implementation.
    """

    @property
    @abstractmethod
    def key_property(self) -> str:
        """Property whose value is the document id."""
        ...

    @property
    @abstractmethod
    def index_prefix(self) -> str:
        """Configured index name prefix."""
        ...

    @abstractmethod
    def create_node(self, node: EntitySnapshot) -> list[BulkAction]:
        ...

    @abstractmethod
    def update_node(self, before: EntitySnapshot, after: EntitySnapshot) -> list[BulkAction]:
        ...

    @abstractmethod
    def delete_node(self, node: EntitySnapshot) -> list[BulkAction]:
        ...

    @abstractmethod
    def create_relationship(self, relationship: EntitySnapshot) -> list[BulkAction]:
        ...

    @abstractmethod
    def update_relationship(
        self, before: EntitySnapshot, after: EntitySnapshot
    ) -> list[BulkAction]:
        ...

    @abstractmethod
    def delete_relationship(self, relationship: EntitySnapshot) -> list[BulkAction]:
        ...

    @abstractmethod
    def get_index_for(self, kind: EntityKind) -> str:
        """Name of the index holding entities of the given kind."""
        ...


def create_mapping(config: MappingConfig) -> IndexMapping:
    """Factory function to create a mapping strategy from configuration.

    Raises:
        ValueError: If the mapping kind is not supported
    """
    from ..config import MappingKind
    from .default import DefaultMapping
    from .labelled import LabelledMapping

    if config.kind == MappingKind.DEFAULT:
        return DefaultMapping(config)
    elif config.kind == MappingKind.LABELLED:
        return LabelledMapping(config)
    else:
        raise ValueError(f"Unsupported mapping kind: {config.kind}")
