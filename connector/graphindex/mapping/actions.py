"""
Bulk index actions produced by mappings.

A BulkAction is one unit of work for the index client's bulk API. It is
addressed by index name and document id and renders to the action format
accepted by ``elasticsearch.helpers.bulk``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

Document = dict[str, Any]


class ActionType(Enum):
    """Bulk action kinds."""

    INDEX = "index"  # replace whole document
    UPSERT = "update"  # partial update, full document if missing
    DELETE = "delete"


@dataclass(frozen=True)
class BulkAction:
    """One index mutation.

    Attributes:
        action: Kind of mutation
        index: Target index name
        doc_id: Document id
        body: Document fields (INDEX/UPSERT only)
        upsert_document: Document stored when an UPSERT target does not exist
    """

    action: ActionType
    index: str
    doc_id: str
    body: Document | None = None
    upsert_document: Document | None = None

    def __post_init__(self) -> None:
        if self.action == ActionType.DELETE:
            if self.body is not None:
                raise ValueError("Delete actions carry no body")
        elif self.body is None:
            raise ValueError(f"{self.action.name} actions require a body")
        if self.upsert_document is not None and self.action != ActionType.UPSERT:
            raise ValueError("Only UPSERT actions carry an upsert document")

    @classmethod
    def index_document(cls, index: str, doc_id: str, body: Document) -> BulkAction:
        return cls(ActionType.INDEX, index, doc_id, body)

    @classmethod
    def upsert(
        cls,
        index: str,
        doc_id: str,
        body: Document,
        upsert_document: Document | None = None,
    ) -> BulkAction:
        """Partial update; ``upsert_document`` (or ``body``) is stored if missing."""
        return cls(ActionType.UPSERT, index, doc_id, body, upsert_document)

    @classmethod
    def delete(cls, index: str, doc_id: str) -> BulkAction:
        return cls(ActionType.DELETE, index, doc_id)

    def to_bulk_dict(self) -> dict[str, Any]:
        """Render as an ``elasticsearch.helpers.bulk`` action."""
        data: dict[str, Any] = {
            "_op_type": self.action.value,
            "_index": self.index,
            "_id": self.doc_id,
        }
        if self.action == ActionType.INDEX:
            data["_source"] = self.body
        elif self.action == ActionType.UPSERT:
            data["doc"] = self.body
            if self.upsert_document is not None:
                data["upsert"] = self.upsert_document
            else:
                data["doc_as_upsert"] = True
        return data
