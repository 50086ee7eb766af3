"""
Search index access for the GraphIndex connector.

This module provides a pluggable index backend interface supporting:
- Elasticsearch (production)
- In-memory (for testing)

and the provisioner that creates missing indices at activation.

Invariants:
    - Logical failures are results, transport failures are exceptions
    - Provisioning never re-creates an existing index

How to change safely:
    - New backends must implement IndexClient protocol
    - Keep transport and logical failures distinct in new backends
"""

from .client import (
    BulkResult,
    CreateIndexResult,
    IndexClient,
    IndexClientError,
    IndexRequestError,
    IndexTransportError,
)
from .es_client import ElasticsearchIndexClient
from .memory import InMemoryIndexClient
from .provisioner import IndexProvisioner, IndexStatus, ProvisioningError, ProvisioningResult

__all__ = [
    # Protocol and types
    "IndexClient",
    "CreateIndexResult",
    "BulkResult",
    "IndexClientError",
    "IndexTransportError",
    "IndexRequestError",
    # Implementations
    "ElasticsearchIndexClient",
    "InMemoryIndexClient",
    # Provisioning
    "IndexProvisioner",
    "IndexStatus",
    "ProvisioningResult",
    "ProvisioningError",
]
