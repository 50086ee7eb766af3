"""
Elasticsearch implementation of the index client.

Wraps the official ``elasticsearch`` client. Retries, timeouts and node
failover are left to its transport; this adapter only translates results
and errors into the IndexClient contract.

Error translation:
    - elasticsearch.ApiError (the cluster answered with an error status)
      -> CreateIndexResult(succeeded=False) for index creation,
         IndexRequestError for existence checks and bulk requests
    - elasticsearch.TransportError (no answer: connection, timeout, TLS)
      -> IndexTransportError
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from elasticsearch import ApiError, Elasticsearch, TransportError
from elasticsearch.helpers import bulk

from ..mapping.actions import BulkAction
from .client import BulkResult, CreateIndexResult, IndexRequestError, IndexTransportError

if TYPE_CHECKING:
    from ..config import ElasticsearchConfig

logger = logging.getLogger(__name__)


class ElasticsearchIndexClient:
    """IndexClient backed by an ``elasticsearch.Elasticsearch`` instance.

    Example:
        >>> client = ElasticsearchIndexClient(Elasticsearch("http://localhost:9200"))
        >>> client.index_exists("neo4j-index-node")
        False
    """

    def __init__(
        self,
        client: Elasticsearch,
        index_settings: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Connected Elasticsearch client
            index_settings: Settings sent with every create-index request
        """
        self.client = client
        self.index_settings = index_settings or {}

    @classmethod
    def from_config(cls, config: ElasticsearchConfig) -> ElasticsearchIndexClient:
        """Build a client from connection configuration."""
        kwargs: dict[str, Any] = {
            "request_timeout": config.request_timeout,
            "verify_certs": config.verify_certs,
        }
        if config.api_key:
            kwargs["api_key"] = config.api_key
        elif config.username:
            kwargs["basic_auth"] = (config.username, config.password or "")

        return cls(Elasticsearch(config.host_list, **kwargs), config.index_settings)

    def index_exists(self, name: str) -> bool:
        try:
            return bool(self.client.indices.exists(index=name))
        except ApiError as e:
            raise IndexRequestError(
                f"Check of index {name} was rejected ({e.meta.status}): {e.message}"
            ) from e
        except TransportError as e:
            raise IndexTransportError(f"Failed to check index {name}: {e}") from e

    def create_index(self, name: str) -> CreateIndexResult:
        kwargs: dict[str, Any] = {"index": name}
        if self.index_settings:
            kwargs["settings"] = self.index_settings

        try:
            response = self.client.indices.create(**kwargs)
        except ApiError as e:
            return CreateIndexResult(False, f"{e.message} ({e.meta.status}): {e.info}")
        except TransportError as e:
            raise IndexTransportError(f"Failed to create index {name}: {e}") from e

        if not response.get("acknowledged", False):
            return CreateIndexResult(False, f"Creation of index {name} was not acknowledged")
        return CreateIndexResult(True)

    def bulk(self, actions: Sequence[BulkAction]) -> BulkResult:
        if not actions:
            return BulkResult(0)

        try:
            succeeded, errors = bulk(
                self.client,
                [action.to_bulk_dict() for action in actions],
                raise_on_error=False,
            )
        except ApiError as e:
            raise IndexRequestError(
                f"Bulk request was rejected ({e.meta.status}): {e.message}"
            ) from e
        except TransportError as e:
            raise IndexTransportError(f"Bulk request failed: {e}") from e

        if errors:
            logger.warning(
                "Bulk request had item errors",
                extra={"succeeded": succeeded, "errors": len(errors)},
            )
        return BulkResult(succeeded, list(errors))

    def close(self) -> None:
        self.client.close()
