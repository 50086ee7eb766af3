"""
Graph snapshot and write-operation types.

Snapshots are point-in-time views of a node or relationship as supplied by
the graph's change capture. Property values are tagged when a snapshot is
built: a value is either a Scalar or a ScalarList, so mapping code never
has to inspect runtime types.

Invariants:
    - Snapshots are immutable once constructed
    - previous/current of an update share entity kind and identity
    - Unknown event kinds parse to UnknownOperation, never to an error

How to change safely:
    - New operation kinds need an OperationType member, a dataclass,
      a parser entry and a dispatcher branch
    - Keep the wire format backward compatible with queued events
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar


class EventParseError(ValueError):
    """Event payload is malformed."""

    pass


class EntityKind(Enum):
    """Kind of graph entity."""

    NODE = "node"
    RELATIONSHIP = "relationship"


class PropertyValue(ABC):
    """A snapshot property value, either a Scalar or a ScalarList."""

    __slots__ = ()

    @abstractmethod
    def map(self, fn: Callable[[Any], Any]) -> Any:
        """Apply fn to the scalar, or to every element of a list."""
        ...

    @abstractmethod
    def to_python(self) -> Any:
        ...

    @staticmethod
    def of(value: Any) -> PropertyValue:
        """Tag a raw value coming from the graph."""
        if isinstance(value, PropertyValue):
            return value
        if isinstance(value, (list, tuple)):
            return ScalarList(tuple(value))
        return Scalar(value)


@dataclass(frozen=True)
class Scalar(PropertyValue):
    value: Any

    def map(self, fn: Callable[[Any], Any]) -> Any:
        return fn(self.value)

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ScalarList(PropertyValue):
    """Ordered list of scalars (a graph array property)."""

    values: tuple[Any, ...]

    def map(self, fn: Callable[[Any], Any]) -> list[Any]:
        return [fn(v) for v in self.values]

    def to_python(self) -> list[Any]:
        return list(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)


@dataclass(frozen=True)
class EntitySnapshot:
    """Point-in-time representation of a node or relationship.

    Attributes:
        kind: Node or relationship
        entity_id: Graph-internal identity
        properties: Property name -> tagged value (None means no properties)
        labels: Node labels
        rel_type: Relationship type
        start_id: Relationship start node identity
        end_id: Relationship end node identity

    Raw values passed in ``properties`` are tagged on construction:
        >>> s = EntitySnapshot.node("1", {"uuid": "k1", "tags": ["a", "b"]})
        >>> s.properties["tags"]
        ScalarList(values=('a', 'b'))
    """

    kind: EntityKind
    entity_id: str
    properties: Mapping[str, PropertyValue] | None = None
    labels: tuple[str, ...] = ()
    rel_type: str | None = None
    start_id: str | None = None
    end_id: str | None = None

    def __post_init__(self) -> None:
        if self.properties is not None:
            tagged = {name: PropertyValue.of(v) for name, v in self.properties.items()}
            object.__setattr__(self, "properties", MappingProxyType(tagged))
        object.__setattr__(self, "labels", tuple(self.labels))

    @classmethod
    def node(
        cls,
        entity_id: str,
        properties: Mapping[str, Any] | None = None,
        labels: tuple[str, ...] | list[str] = (),
    ) -> EntitySnapshot:
        return cls(EntityKind.NODE, str(entity_id), properties, tuple(labels))

    @classmethod
    def relationship(
        cls,
        entity_id: str,
        properties: Mapping[str, Any] | None = None,
        rel_type: str | None = None,
        start_id: str | None = None,
        end_id: str | None = None,
    ) -> EntitySnapshot:
        return cls(
            EntityKind.RELATIONSHIP,
            str(entity_id),
            properties,
            rel_type=rel_type,
            start_id=start_id,
            end_id=end_id,
        )

    @classmethod
    def from_dict(cls, kind: EntityKind, data: Mapping[str, Any]) -> EntitySnapshot:
        """Create from the wire representation.

        Args:
            kind: Entity kind implied by the enclosing operation
            data: {"id", "properties", "labels"} for nodes,
                {"id", "properties", "type", "start", "end"} for relationships

        Raises:
            EventParseError: If the payload is malformed
        """
        if not isinstance(data, Mapping):
            raise EventParseError(f"Snapshot must be an object, got {type(data).__name__}")
        if "id" not in data:
            raise EventParseError("Snapshot is missing 'id'")

        properties = data.get("properties")
        if properties is not None and not isinstance(properties, Mapping):
            raise EventParseError("Snapshot 'properties' must be an object")

        if kind == EntityKind.NODE:
            return cls.node(data["id"], properties, data.get("labels") or ())
        return cls.relationship(
            data["id"],
            properties,
            rel_type=data.get("type"),
            start_id=data.get("start"),
            end_id=data.get("end"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        data: dict[str, Any] = {"id": self.entity_id}
        if self.properties is not None:
            data["properties"] = {k: v.to_python() for k, v in self.properties.items()}
        if self.kind == EntityKind.NODE:
            data["labels"] = list(self.labels)
        else:
            data["type"] = self.rel_type
            data["start"] = self.start_id
            data["end"] = self.end_id
        return data

    def same_entity(self, other: EntitySnapshot) -> bool:
        return self.kind == other.kind and self.entity_id == other.entity_id


class OperationType(Enum):
    """Kinds of graph write operation."""

    NODE_CREATED = "node_created"
    NODE_UPDATED = "node_updated"
    NODE_DELETED = "node_deleted"
    RELATIONSHIP_CREATED = "relationship_created"
    RELATIONSHIP_UPDATED = "relationship_updated"
    RELATIONSHIP_DELETED = "relationship_deleted"


class WriteOperation:
    """Base class for graph write events."""

    type: ClassVar[OperationType | str]


@dataclass(frozen=True)
class _SingleSnapshotOperation(WriteOperation):
    snapshot: EntitySnapshot
    expected_kind: ClassVar[EntityKind]

    def __post_init__(self) -> None:
        if self.snapshot.kind != self.expected_kind:
            raise ValueError(
                f"{type(self).__name__} requires a {self.expected_kind.value} snapshot"
            )


@dataclass(frozen=True)
class _UpdateOperation(WriteOperation):
    previous: EntitySnapshot
    current: EntitySnapshot
    expected_kind: ClassVar[EntityKind]

    def __post_init__(self) -> None:
        if self.current.kind != self.expected_kind:
            raise ValueError(
                f"{type(self).__name__} requires {self.expected_kind.value} snapshots"
            )
        if not self.previous.same_entity(self.current):
            raise ValueError(
                f"previous ({self.previous.entity_id}) and current "
                f"({self.current.entity_id}) are different entities"
            )


@dataclass(frozen=True)
class NodeCreated(_SingleSnapshotOperation):
    type: ClassVar[OperationType] = OperationType.NODE_CREATED
    expected_kind: ClassVar[EntityKind] = EntityKind.NODE


@dataclass(frozen=True)
class NodeUpdated(_UpdateOperation):
    type: ClassVar[OperationType] = OperationType.NODE_UPDATED
    expected_kind: ClassVar[EntityKind] = EntityKind.NODE


@dataclass(frozen=True)
class NodeDeleted(_SingleSnapshotOperation):
    type: ClassVar[OperationType] = OperationType.NODE_DELETED
    expected_kind: ClassVar[EntityKind] = EntityKind.NODE


@dataclass(frozen=True)
class RelationshipCreated(_SingleSnapshotOperation):
    type: ClassVar[OperationType] = OperationType.RELATIONSHIP_CREATED
    expected_kind: ClassVar[EntityKind] = EntityKind.RELATIONSHIP


@dataclass(frozen=True)
class RelationshipUpdated(_UpdateOperation):
    type: ClassVar[OperationType] = OperationType.RELATIONSHIP_UPDATED
    expected_kind: ClassVar[EntityKind] = EntityKind.RELATIONSHIP


@dataclass(frozen=True)
class RelationshipDeleted(_SingleSnapshotOperation):
    type: ClassVar[OperationType] = OperationType.RELATIONSHIP_DELETED
    expected_kind: ClassVar[EntityKind] = EntityKind.RELATIONSHIP


@dataclass(frozen=True)
class UnknownOperation(WriteOperation):
    """An event whose kind this connector does not handle."""

    type_name: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str:  # type: ignore[override]
        return self.type_name


_SINGLE_OPERATIONS: dict[OperationType, type[_SingleSnapshotOperation]] = {
    OperationType.NODE_CREATED: NodeCreated,
    OperationType.NODE_DELETED: NodeDeleted,
    OperationType.RELATIONSHIP_CREATED: RelationshipCreated,
    OperationType.RELATIONSHIP_DELETED: RelationshipDeleted,
}

_UPDATE_OPERATIONS: dict[OperationType, type[_UpdateOperation]] = {
    OperationType.NODE_UPDATED: NodeUpdated,
    OperationType.RELATIONSHIP_UPDATED: RelationshipUpdated,
}


def parse_operation(data: Mapping[str, Any]) -> WriteOperation:
    """Create a write operation from its wire representation.

    Example:
        >>> op = parse_operation({
        ...     "type": "node_updated",
        ...     "previous": {"id": "7", "properties": {"uuid": "k1", "name": "Bob"}},
        ...     "current": {"id": "7", "properties": {"uuid": "k1", "name": "Rob"}},
        ... })
        >>> op.type
        <OperationType.NODE_UPDATED: 'node_updated'>
        >>> op.current.properties["name"]
        Scalar(value='Rob')

    Raises:
        EventParseError: If the payload is malformed
    """
    if not isinstance(data, Mapping):
        raise EventParseError(f"Operation must be an object, got {type(data).__name__}")

    type_name = data.get("type")
    if not isinstance(type_name, str):
        raise EventParseError("Operation is missing 'type'")

    try:
        op_type = OperationType(type_name)
    except ValueError:
        return UnknownOperation(type_name, dict(data))

    kind = EntityKind.NODE if op_type.value.startswith("node_") else EntityKind.RELATIONSHIP

    try:
        if op_type in _UPDATE_OPERATIONS:
            missing = [f for f in ("previous", "current") if f not in data]
            if missing:
                raise EventParseError(f"Missing required fields: {missing}")
            return _UPDATE_OPERATIONS[op_type](
                EntitySnapshot.from_dict(kind, data["previous"]),
                EntitySnapshot.from_dict(kind, data["current"]),
            )

        if "snapshot" not in data:
            raise EventParseError("Missing required fields: ['snapshot']")
        return _SINGLE_OPERATIONS[op_type](EntitySnapshot.from_dict(kind, data["snapshot"]))
    except EventParseError:
        raise
    except ValueError as e:
        raise EventParseError(str(e)) from e
