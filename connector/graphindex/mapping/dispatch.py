"""
Routes graph write operations to mapping handlers.
"""

from __future__ import annotations

import logging

from ..events.types import OperationType, WriteOperation
from .actions import BulkAction
from .base import IndexMapping


class OperationDispatcher:
    """Translates a WriteOperation into bulk actions via an IndexMapping.

    Holds no state besides the mapping and performs no I/O, so one
    dispatcher can be shared between threads.

    Example:
        >>> dispatcher = OperationDispatcher(DefaultMapping(MappingConfig()))
        >>> dispatcher.get_actions(NodeDeleted(EntitySnapshot.node("1", {"uuid": "k1"})))
        [BulkAction(action=<ActionType.DELETE: 'delete'>, index='neo4j-index-node', doc_id='k1', body=None, upsert_document=None)]
    """

    def __init__(self, mapping: IndexMapping, logger: logging.Logger | None = None) -> None:
        self.mapping = mapping
        self.logger = logger or logging.getLogger(__name__)

    def get_actions(self, operation: WriteOperation) -> list[BulkAction]:
        op_type = getattr(operation, "type", None)

        if op_type == OperationType.NODE_CREATED:
            return self.mapping.create_node(operation.snapshot)

        elif op_type == OperationType.NODE_UPDATED:
            return self.mapping.update_node(operation.previous, operation.current)

        elif op_type == OperationType.NODE_DELETED:
            return self.mapping.delete_node(operation.snapshot)

        elif op_type == OperationType.RELATIONSHIP_CREATED:
            return self.mapping.create_relationship(operation.snapshot)

        elif op_type == OperationType.RELATIONSHIP_UPDATED:
            return self.mapping.update_relationship(operation.previous, operation.current)

        elif op_type == OperationType.RELATIONSHIP_DELETED:
            return self.mapping.delete_relationship(operation.snapshot)

        else:
            self.logger.warning(
                f"Unsupported operation {op_type}",
                extra={"operation": type(operation).__name__},
            )
            return []
