"""
GraphIndex - keeps a search index synchronized with a property graph.

This package translates graph write events (node/relationship created,
updated, deleted) into bulk index-mutation actions and makes sure the
target indices exist before anything is written.

Architecture:
    ┌──────────────┐     ┌────────────────────┐     ┌──────────────┐
    │ Graph change │────▶│ OperationDispatcher│────▶│ IndexMapping │
    │   capture    │     │  (WriteOperation)  │     │  (strategy)  │
    └──────────────┘     └────────────────────┘     └──────┬───────┘
                                                           │
                                                           ▼
                        ┌──────────────────┐      ┌────────────────┐
                        │ IndexProvisioner │      │ DocumentBuilder│
                        │ (at activation)  │      └──────┬─────────┘
                        └────────┬─────────┘             │ BulkAction
                                 ▼                       ▼
                        ┌─────────────────────────────────────────┐
                        │         IndexClient (Elasticsearch)     │
                        └─────────────────────────────────────────┘

Invariants:
    - The key property never appears in an indexed document
    - Document ids are the string form of the key property value
    - Translation performs no I/O and holds no per-call state
    - Indices are provisioned before any event is synchronized

How to change safely:
    - New backends implement the IndexMapping protocol
    - New event kinds need a dispatcher branch and a wire-format parser
    - Keep provisioning failure policy explicit in ProvisioningResult
"""

from ._version import __version__

__all__ = ["__version__"]
