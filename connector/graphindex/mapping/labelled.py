"""
Labelled mapping: a single shared index with denormalized graph metadata.

Nodes and relationships share ``<prefix>``. Each document carries
``_kind`` plus the node labels (``_labels``) or the relationship type and
endpoints (``_type``, ``_start``, ``_end``), so one query can filter by
label or type. Updates are partial: only changed fields are sent, and
removed properties are cleared by setting them to None. Each partial
update carries the full current document, stored as is when the target
document does not exist yet. An update that removes the key property under
strict keys deletes the document stored under the old key.
"""

from __future__ import annotations

import logging

from ..config import MappingConfig
from ..events.types import EntityKind, EntitySnapshot
from .actions import BulkAction, Document
from .document import DocumentBuilder, orphaned_key, previous_key, stringify

KIND_FIELD = "_kind"
LABELS_FIELD = "_labels"
TYPE_FIELD = "_type"
START_FIELD = "_start"
END_FIELD = "_end"


def add_graph_metadata(document: Document, snapshot: EntitySnapshot) -> None:
    document[KIND_FIELD] = snapshot.kind.value
    if snapshot.kind == EntityKind.NODE:
        document[LABELS_FIELD] = list(snapshot.labels)
    else:
        document[TYPE_FIELD] = snapshot.rel_type
        document[START_FIELD] = snapshot.start_id
        document[END_FIELD] = snapshot.end_id


class LabelledMapping:
    """Shared-index mapping with partial updates."""

    def __init__(self, config: MappingConfig, logger: logging.Logger | None = None) -> None:
        self.config = config
        self.builder = DocumentBuilder(
            config,
            normalizer=stringify if config.normalize_to_string else None,
            extras=add_graph_metadata,
            logger=logger,
        )

    @property
    def key_property(self) -> str:
        return self.config.key_property

    @property
    def index_prefix(self) -> str:
        return self.config.index_prefix

    def get_index_for(self, kind: EntityKind) -> str:
        return self.index_prefix

    def create_node(self, node: EntitySnapshot) -> list[BulkAction]:
        return [self._index(node)]

    def update_node(self, before: EntitySnapshot, after: EntitySnapshot) -> list[BulkAction]:
        return self._patch(before, after)

    def delete_node(self, node: EntitySnapshot) -> list[BulkAction]:
        return [self._delete(node)]

    def create_relationship(self, relationship: EntitySnapshot) -> list[BulkAction]:
        return [self._index(relationship)]

    def update_relationship(
        self, before: EntitySnapshot, after: EntitySnapshot
    ) -> list[BulkAction]:
        return self._patch(before, after)

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

    def _patch(self, before: EntitySnapshot, after: EntitySnapshot) -> list[BulkAction]:
        stale = orphaned_key(self.builder, before, after)
        if stale is not None:
            return [BulkAction.delete(self.get_index_for(before.kind), stale)]

        key = self.builder.extract_key(after)
        old_key = previous_key(self.builder, before)

        if old_key != key:
            actions = []
            if old_key is not None:
                actions.append(BulkAction.delete(self.get_index_for(before.kind), old_key))
            actions.append(self._index(after))
            return actions

        old = self.builder.build_document(before)
        new = self.builder.build_document(after)
        changes = diff_documents(old, new)
        if not changes:
            return []
        return [BulkAction.upsert(self.get_index_for(after.kind), key, changes, new)]


def diff_documents(old: Document, new: Document) -> Document:
    """Fields of ``new`` that differ from ``old``; removed fields map to None."""
    changes = {name: value for name, value in new.items() if name not in old or old[name] != value}
    for name in old:
        if name not in new:
            changes[name] = None
    return changes
