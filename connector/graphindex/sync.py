"""
Index synchronizer for the GraphIndex connector.

The IndexSynchronizer provisions the mapping's indices once at activation,
then translates batches of graph write operations into bulk actions and
submits them to the index client.

Invariants:
    - Nothing is submitted before activation succeeded
    - A provisioning transport fault leaves the synchronizer inactive
    - An operation that cannot be mapped is logged and skipped, the rest
      of the batch is still submitted
    - Actions are submitted in operation order

How to change safely:
    - Keep translation free of I/O; only bulk submission talks to the index
    - Test with the in-memory client before pointing at a cluster
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .events.types import WriteOperation
from .index.client import BulkResult, IndexClient
from .index.provisioner import IndexProvisioner, ProvisioningResult
from .mapping.actions import BulkAction
from .mapping.base import IndexMapping
from .mapping.dispatch import OperationDispatcher
from .mapping.document import MappingError


class SynchronizerError(Exception):
    """Error during synchronization."""

    pass


class SynchronizerNotActiveError(SynchronizerError):
    """Synchronization attempted before successful activation."""

    pass


@dataclass
class SyncResult:
    """Result of synchronizing a batch of operations.

    Attributes:
        operations: Number of operations received
        actions: Actions submitted
        skipped: (operation, error) pairs that could not be mapped
        bulk: Bulk response, None if nothing was submitted
    """

    operations: int
    actions: list[BulkAction] = field(default_factory=list)
    skipped: list[tuple[WriteOperation, str]] = field(default_factory=list)
    bulk: BulkResult | None = None

    @property
    def ok(self) -> bool:
        return not self.skipped and (self.bulk is None or self.bulk.ok)


class IndexSynchronizer:
    """Keeps a search index in step with graph write operations.

    Example:
        >>> sync = IndexSynchronizer(create_mapping(config.mapping), client)
        >>> sync.activate().ok
        True
        >>> result = sync.synchronize([NodeCreated(snapshot)])
        >>> result.operations, len(result.actions), result.ok
        (1, 1, True)
    """

    def __init__(
        self,
        mapping: IndexMapping,
        client: IndexClient,
        provisioner: IndexProvisioner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            mapping: Mapping strategy
            client: Index client used for provisioning and bulk submission
            provisioner: Index provisioner (fail-fast over ``client`` if not given)
            logger: Logger to use
        """
        self.mapping = mapping
        self.client = client
        self.logger = logger or logging.getLogger(__name__)
        self.provisioner = provisioner or IndexProvisioner(client, logger=self.logger)
        self.dispatcher = OperationDispatcher(mapping, logger=self.logger)

        self._active = False
        self._lock = threading.Lock()
        self._operation_count = 0
        self._action_count = 0
        self._skipped_count = 0
        self._error_count = 0

    @property
    def is_active(self) -> bool:
        return self._active

    def activate(self) -> ProvisioningResult:
        """Provision indices and enable synchronization.

        Raises:
            ProvisioningError: If the index service could not be reached;
                the synchronizer stays inactive
        """
        self.logger.info(
            "Activating index synchronizer",
            extra={"index_prefix": self.mapping.index_prefix},
        )
        result = self.provisioner.ensure_indices_for(self.mapping)

        if result.failed:
            self.logger.warning(
                "Some indices could not be created",
                extra={"failed": sorted(result.failed)},
            )

        self._active = True
        return result

    def translate(self, operation: WriteOperation) -> list[BulkAction]:
        """Bulk actions representing one operation. Performs no I/O."""
        return self.dispatcher.get_actions(operation)

    def synchronize(self, operations: Iterable[WriteOperation]) -> SyncResult:
        """Translate operations and submit the resulting actions in one bulk.

        Raises:
            SynchronizerNotActiveError: If activate() has not succeeded
            IndexTransportError: If the bulk request could not be delivered
            IndexRequestError: If the bulk request was rejected as a whole
        """
        if not self._active:
            raise SynchronizerNotActiveError("activate() must succeed before synchronizing")

        batch = list(operations)
        result = SyncResult(operations=len(batch))

        for operation in batch:
            try:
                result.actions.extend(self.translate(operation))
            except MappingError as e:
                result.skipped.append((operation, str(e)))
                self.logger.error(
                    f"Failed to map operation: {e}",
                    extra={"operation": type(operation).__name__},
                )

        if result.actions:
            result.bulk = self.client.bulk(result.actions)
            if not result.bulk.ok:
                self.logger.error(
                    "Bulk request had item errors",
                    extra={
                        "succeeded": result.bulk.succeeded,
                        "errors": len(result.bulk.errors),
                    },
                )

        with self._lock:
            self._operation_count += result.operations
            self._action_count += len(result.actions)
            self._skipped_count += len(result.skipped)
            if result.bulk is not None:
                self._error_count += len(result.bulk.errors)

        self.logger.debug(
            "Synchronized batch",
            extra={
                "operations": result.operations,
                "actions": len(result.actions),
                "skipped": len(result.skipped),
            },
        )
        return result

    @property
    def stats(self) -> dict[str, Any]:
        """Get synchronizer statistics."""
        with self._lock:
            return {
                "active": self._active,
                "operation_count": self._operation_count,
                "action_count": self._action_count,
                "skipped_count": self._skipped_count,
                "error_count": self._error_count,
            }
