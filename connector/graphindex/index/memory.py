"""
In-memory index client implementation for testing.

This module provides a simple in-memory index backend for:
- Unit tests
- Integration tests
- Local development without Elasticsearch

Invariants:
    - All data is lost on process exit
    - Bulk actions follow Elasticsearch semantics (index replaces,
      update merges or stores the upsert document, delete of a missing
      document is an item error)

How to change safely:
    - This is test-only code, changes don't affect production
    - Keep interface compatible with IndexClient protocol
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from ..mapping.actions import ActionType, BulkAction
from .client import BulkResult, CreateIndexResult, IndexRequestError, IndexTransportError

logger = logging.getLogger(__name__)


class InMemoryIndexClient:
    """In-memory implementation of IndexClient for testing.

    Besides storing documents it records every call and can simulate
    failures:
    - ``fail_transport``: index names whose exists/create calls raise
      IndexTransportError
    - ``reject_create``: index names whose creation is refused
    - ``reject_exists``: index names whose existence check is rejected
      with IndexRequestError

    Example:
        >>> client = InMemoryIndexClient()
        >>> client.create_index("people")
        CreateIndexResult(succeeded=True, error_message=None)
        >>> client.bulk([BulkAction.index_document("people", "k1", {"name": "Bob"})])
        BulkResult(succeeded=1, errors=[])
    """

    def __init__(
        self,
        existing: Sequence[str] = (),
        fail_transport: Sequence[str] = (),
        reject_create: Sequence[str] = (),
        reject_exists: Sequence[str] = (),
    ) -> None:
        self._indices: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in existing}
        self.fail_transport = set(fail_transport)
        self.reject_create = set(reject_create)
        self.reject_exists = set(reject_exists)
        self.calls: dict[str, list[str]] = defaultdict(list)
        self.bulk_requests: list[list[BulkAction]] = []
        self._lock = threading.Lock()

    @property
    def indices(self) -> list[str]:
        return sorted(self._indices)

    def documents(self, index: str) -> dict[str, dict[str, Any]]:
        """Documents of an index, by id."""
        return self._indices[index]

    def index_exists(self, name: str) -> bool:
        self.calls["index_exists"].append(name)
        if name in self.fail_transport:
            raise IndexTransportError(f"Connection refused checking index {name}")
        if name in self.reject_exists:
            raise IndexRequestError(f"Check of index {name} was rejected (403): forbidden")
        return name in self._indices

    def create_index(self, name: str) -> CreateIndexResult:
        self.calls["create_index"].append(name)
        if name in self.fail_transport:
            raise IndexTransportError(f"Connection refused creating index {name}")
        if name in self.reject_create:
            return CreateIndexResult(False, f"index [{name}] creation rejected")

        with self._lock:
            if name in self._indices:
                return CreateIndexResult(False, f"index [{name}] already exists")
            self._indices[name] = {}
        logger.debug(f"InMemoryIndexClient created index {name}")
        return CreateIndexResult(True)

    def bulk(self, actions: Sequence[BulkAction]) -> BulkResult:
        self.bulk_requests.append(list(actions))
        succeeded = 0
        errors = []

        with self._lock:
            for action in actions:
                error = self._apply(action)
                if error is None:
                    succeeded += 1
                else:
                    errors.append(
                        {
                            action.action.value: {
                                "_index": action.index,
                                "_id": action.doc_id,
                                "error": error,
                            }
                        }
                    )

        return BulkResult(succeeded, errors)

    def _apply(self, action: BulkAction) -> str | None:
        # Elasticsearch auto-creates indices on write
        docs = self._indices.setdefault(action.index, {})

        if action.action == ActionType.INDEX:
            docs[action.doc_id] = dict(action.body or {})
        elif action.action == ActionType.UPSERT:
            if action.doc_id in docs:
                docs[action.doc_id].update(action.body or {})
            elif action.upsert_document is not None:
                docs[action.doc_id] = dict(action.upsert_document)
            else:
                docs[action.doc_id] = dict(action.body or {})
        elif action.action == ActionType.DELETE:
            if docs.pop(action.doc_id, None) is None:
                return "not_found"
        return None
