"""
Graph event model for the GraphIndex connector.

This module defines what the graph's change capture hands to the connector:
- EntitySnapshot: a node or relationship at a point in time
- WriteOperation: one of six create/update/delete events
- parse_operation: the JSON wire format for queued events

Invariants:
    - Snapshots and operations are read-only inputs
    - Property values are tagged as Scalar or ScalarList at construction

How to change safely:
    - Add new operation kinds alongside a dispatcher branch
    - Unknown kinds must keep parsing to UnknownOperation
"""

from .types import (
    EntityKind,
    EntitySnapshot,
    EventParseError,
    NodeCreated,
    NodeDeleted,
    NodeUpdated,
    OperationType,
    PropertyValue,
    RelationshipCreated,
    RelationshipDeleted,
    RelationshipUpdated,
    Scalar,
    ScalarList,
    UnknownOperation,
    WriteOperation,
    parse_operation,
)

__all__ = [
    # Snapshots
    "EntityKind",
    "EntitySnapshot",
    "PropertyValue",
    "Scalar",
    "ScalarList",
    # Operations
    "OperationType",
    "WriteOperation",
    "NodeCreated",
    "NodeUpdated",
    "NodeDeleted",
    "RelationshipCreated",
    "RelationshipUpdated",
    "RelationshipDeleted",
    "UnknownOperation",
    # Wire format
    "parse_operation",
    "EventParseError",
]
