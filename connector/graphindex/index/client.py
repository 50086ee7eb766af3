"""
Base protocol and types for the search index client.

This module defines the IndexClient protocol that index backends must
implement, along with result types and errors.

Invariants:
    - A refused index creation or a failed bulk item is returned as a
      result value, never raised
    - A transport failure (request not answered) raises IndexTransportError
    - An error status for an existence check or for a whole bulk request
      raises IndexRequestError

How to change safely:
    - Protocol changes require updating all implementations
    - Retries and backoff stay inside the backend's transport
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from ..mapping.actions import BulkAction


class IndexClientError(Exception):
    """Base exception for index client operations."""

    pass


class IndexTransportError(IndexClientError):
    """The index service could not be reached or did not answer."""

    pass


class IndexRequestError(IndexClientError):
    """The index service answered a request with an error status."""

    pass


@dataclass(frozen=True)
class CreateIndexResult:
    """Outcome of a create-index request.

    Attributes:
        succeeded: Whether the index was created
        error_message: Error details when not succeeded
    """

    succeeded: bool
    error_message: str | None = None


@dataclass
class BulkResult:
    """Outcome of a bulk request.

    Attributes:
        succeeded: Number of actions applied
        errors: Per-action error items reported by the service
    """

    succeeded: int
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@runtime_checkable
class IndexClient(Protocol):
    """Protocol for search index backends.

    Example:
        >>> client = ElasticsearchIndexClient.from_config(config.elasticsearch)
        >>> if not client.index_exists("neo4j-index-node"):
        ...     client.create_index("neo4j-index-node")
    """

    @abstractmethod
    def index_exists(self, name: str) -> bool:
        """Whether the index exists.

        Raises:
            IndexTransportError: If the service cannot be reached
            IndexRequestError: If the service rejects the check
        """
        ...

    @abstractmethod
    def create_index(self, name: str) -> CreateIndexResult:
        """Create an index.

        Raises:
            IndexTransportError: If the service cannot be reached
        """
        ...

    @abstractmethod
    def bulk(self, actions: Sequence[BulkAction]) -> BulkResult:
        """Submit actions in one batch.

        Raises:
            IndexTransportError: If the service cannot be reached
            IndexRequestError: If the service rejects the whole request
        """
        ...
