"""
Default mapping: one index per entity kind, whole-document updates.

Nodes go to ``<prefix>-node`` and relationships to ``<prefix>-relationship``.
Every update re-indexes the full current document. An update that removes
the key property under strict keys deletes the document stored under the
old key.
"""

from __future__ import annotations

import logging

from ..config import MappingConfig
from ..events.types import EntityKind, EntitySnapshot
from .actions import BulkAction
from .document import DocumentBuilder, orphaned_key, previous_key, stringify


class DefaultMapping:
    """Replace-on-update mapping with separate node and relationship indices."""

    def __init__(self, config: MappingConfig, logger: logging.Logger | None = None) -> None:
        self.config = config
        self.builder = DocumentBuilder(
            config,
            normalizer=stringify if config.normalize_to_string else None,
            logger=logger,
        )

    @property
    def key_property(self) -> str:
        return self.config.key_property

    @property
    def index_prefix(self) -> str:
        return self.config.index_prefix

    def get_index_for(self, kind: EntityKind) -> str:
        return f"{self.index_prefix}-{kind.value}"

    def create_node(self, node: EntitySnapshot) -> list[BulkAction]:
        return [self._index(node)]

    def update_node(self, before: EntitySnapshot, after: EntitySnapshot) -> list[BulkAction]:
        return self._replace(before, after)

    def delete_node(self, node: EntitySnapshot) -> list[BulkAction]:
        return [self._delete(node)]

    def create_relationship(self, relationship: EntitySnapshot) -> list[BulkAction]:
        return [self._index(relationship)]

    def update_relationship(
        self, before: EntitySnapshot, after: EntitySnapshot
    ) -> list[BulkAction]:
        return self._replace(before, after)

    def delete_relationship(self, relationship: EntitySnapshot) -> list[BulkAction]:
        return [self._delete(relationship)]

    def _index(self, snapshot: EntitySnapshot) -> BulkAction:
        return BulkAction.index_document(
            self.get_index_for(snapshot.kind),
            self.builder.extract_key(snapshot),
            self.builder.build_document(snapshot),
        )

    def _delete(self, snapshot: EntitySnapshot) -> BulkAction:
        return BulkAction.delete(
            self.get_index_for(snapshot.kind),
            self.builder.extract_key(snapshot),
        )

    def _replace(self, before: EntitySnapshot, after: EntitySnapshot) -> list[BulkAction]:
        stale = orphaned_key(self.builder, before, after)
        if stale is not None:
            return [BulkAction.delete(self.get_index_for(before.kind), stale)]

        actions = []
        # A changed key moves the document; drop the one under the old id
        old_key = previous_key(self.builder, before)
        if old_key is not None and old_key != self.builder.extract_key(after):
            actions.append(BulkAction.delete(self.get_index_for(before.kind), old_key))
        actions.append(self._index(after))
        return actions
