"""
Document builder: turns a graph entity snapshot into a search document.

Invariants:
    - The key property is never copied into the document
    - List properties keep their length and order, each element normalized
    - Extra fields are added after, and win over, the common fields
    - Building holds no per-call state; one builder serves all threads

How to change safely:
    - Changing the normalizer changes stored values; reindex afterwards
    - Extras must only read the snapshot, never mutate it
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..config import MappingConfig
from ..events.types import EntitySnapshot, ScalarList
from .actions import Document

# Document id used for snapshots without a key property when strict_keys is off.
MISSING_KEY_ID = "null"

Normalizer = Callable[[Any], Any]
ExtraFields = Callable[[Document, EntitySnapshot], None]


class MappingError(Exception):
    """A snapshot cannot be mapped to a document."""

    pass


class MissingKeyPropertyError(MappingError):
    """Snapshot has no value for the configured key property."""

    def __init__(self, snapshot: EntitySnapshot, key_property: str) -> None:
        self.snapshot = snapshot
        self.key_property = key_property
        super().__init__(
            f"{snapshot.kind.value} {snapshot.entity_id} has no '{key_property}' property"
        )


class InvalidKeyPropertyError(MappingError):
    """Key property value cannot be used as a document id."""

    pass


def identity(value: Any) -> Any:
    return value


def stringify(value: Any) -> Any:
    """Normalizer storing every value as a string (None stays None)."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DocumentBuilder:
    """Builds search documents from entity snapshots.

    Backend-specific behavior is injected rather than inherited: a
    ``normalizer`` applied to every scalar (and every list element) and an
    ``extras`` hook that can append computed fields.

    Example:
        >>> builder = DocumentBuilder(MappingConfig(key_property="id"))
        >>> snapshot = EntitySnapshot.node("1", {"id": "k1", "name": "Bob", "tags": ["a", "b"]})
        >>> builder.build_document(snapshot)
        {'name': 'Bob', 'tags': ['a', 'b']}
        >>> builder.extract_key(snapshot)
        'k1'
    """

    def __init__(
        self,
        config: MappingConfig,
        normalizer: Normalizer | None = None,
        extras: ExtraFields | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self._normalizer = normalizer or identity
        self._extras = extras
        self.logger = logger or logging.getLogger(__name__)

    @property
    def key_property(self) -> str:
        return self.config.key_property

    def build_document(self, snapshot: EntitySnapshot) -> Document:
        """Map every property except the key property, then add extras."""
        document: Document = {}
        for name, value in (snapshot.properties or {}).items():
            if name == self.key_property:
                continue
            document[name] = value.map(self.normalize_property)

        self.add_extra(document, snapshot)
        return document

    def normalize_property(self, value: Any) -> Any:
        return self._normalizer(value)

    def add_extra(self, document: Document, snapshot: EntitySnapshot) -> None:
        if self._extras is not None:
            self._extras(document, snapshot)

    def has_key(self, snapshot: EntitySnapshot) -> bool:
        """Whether the snapshot carries a non-null key property."""
        value = (snapshot.properties or {}).get(self.key_property)
        return value is not None and value.to_python() is not None

    def extract_key(self, snapshot: EntitySnapshot) -> str:
        """Get the document id for a snapshot.

        Raises:
            MissingKeyPropertyError: If the key property is absent and
                strict_keys is enabled
            InvalidKeyPropertyError: If the key property is a list
        """
        if not self.has_key(snapshot):
            if self.config.strict_keys:
                raise MissingKeyPropertyError(snapshot, self.key_property)
            self.logger.warning(
                f"Missing key property, indexing under id '{MISSING_KEY_ID}'",
                extra={
                    "kind": snapshot.kind.value,
                    "entity_id": snapshot.entity_id,
                    "key_property": self.key_property,
                },
            )
            return MISSING_KEY_ID

        value = snapshot.properties[self.key_property]
        if isinstance(value, ScalarList):
            raise InvalidKeyPropertyError(
                f"{snapshot.kind.value} {snapshot.entity_id}: "
                f"key property '{self.key_property}' is a list"
            )

        return str(value.to_python())


def previous_key(builder: DocumentBuilder, before: EntitySnapshot) -> str | None:
    """Key of the pre-update snapshot, or None if it had no key property."""
    if not builder.has_key(before):
        return None
    return builder.extract_key(before)


def orphaned_key(
    builder: DocumentBuilder, before: EntitySnapshot, after: EntitySnapshot
) -> str | None:
    """Old document id left behind by an update that removed the key property.

    Only strict builders orphan documents; lenient ones re-index under
    MISSING_KEY_ID.
    """
    if not builder.config.strict_keys or builder.has_key(after):
        return None
    old_key = previous_key(builder, before)
    if old_key is not None:
        builder.logger.warning(
            f"Key property removed, deleting document {old_key}",
            extra={
                "kind": after.kind.value,
                "entity_id": after.entity_id,
                "key_property": builder.key_property,
            },
        )
    return old_key
