"""
Index provisioning: make sure target indices exist before indexing starts.

Invariants:
    - An existing index is never created again
    - Each distinct index name is checked at most once per call
    - A refused creation is logged and reported, never raised
    - A transport fault or a rejected existence check is always raised
      as ProvisioningError

Failure policy:
    fail_fast=True (default, all-or-nothing): the first fault stops
    provisioning; the remaining names are reported as skipped.
    fail_fast=False (best-effort): every name is attempted and all
    faults are raised together at the end.

How to change safely:
    - Run once at activation, never per event
    - Keep the outcome of every name visible in ProvisioningResult
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..events.types import EntityKind
from ..mapping.base import IndexMapping
from .client import IndexClient, IndexClientError


class IndexStatus(Enum):
    """Outcome of provisioning one index."""

    EXISTING = "existing"
    CREATED = "created"
    FAILED = "failed"


@dataclass
class ProvisioningResult:
    """Outcome of provisioning a set of indices.

    Attributes:
        existing: Indices that were already present
        created: Indices created by this call
        failed: Indices whose creation was refused, with the error message
        faults: Indices whose check or creation raised an IndexClientError
        skipped: Indices not attempted because of an earlier fault
    """

    existing: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    faults: dict[str, IndexClientError] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def ready(self) -> list[str]:
        """Indices that exist after provisioning."""
        return self.existing + self.created

    @property
    def ok(self) -> bool:
        return not (self.failed or self.faults or self.skipped)


class ProvisioningError(Exception):
    """Provisioning hit client faults; indexing must not start."""

    def __init__(self, message: str, result: ProvisioningResult) -> None:
        super().__init__(message)
        self.result = result


class IndexProvisioner:
    """Creates missing indices through an IndexClient.

    Example:
        >>> provisioner = IndexProvisioner(client)
        >>> result = provisioner.ensure_indices_for(mapping)
        >>> result.created
        ['neo4j-index-node', 'neo4j-index-relationship']
    """

    def __init__(
        self,
        client: IndexClient,
        fail_fast: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.fail_fast = fail_fast
        self.logger = logger or logging.getLogger(__name__)

    def ensure_indices_for(self, mapping: IndexMapping) -> ProvisioningResult:
        """Provision the node and relationship indices of a mapping."""
        return self.ensure_indices(
            [mapping.get_index_for(EntityKind.NODE), mapping.get_index_for(EntityKind.RELATIONSHIP)]
        )

    def ensure_indices(self, index_names: Iterable[str]) -> ProvisioningResult:
        """Ensure every named index exists.

        Raises:
            ProvisioningError: On client faults, carrying the result
        """
        names = list(dict.fromkeys(index_names))
        result = ProvisioningResult()

        for position, name in enumerate(names):
            try:
                status, error_message = self._provision(name)
            except IndexClientError as e:
                result.faults[name] = e
                if self.fail_fast:
                    result.skipped.extend(names[position + 1 :])
                    self.logger.error(
                        f"Fault provisioning index {name}, aborting",
                        extra={"index": name, "skipped": result.skipped},
                    )
                    raise ProvisioningError(
                        f"Failed to provision index {name}: {e}", result
                    ) from e
                self.logger.error(
                    f"Fault provisioning index {name}: {e}",
                    extra={"index": name},
                )
                continue

            if status == IndexStatus.EXISTING:
                result.existing.append(name)
            elif status == IndexStatus.CREATED:
                result.created.append(name)
            else:
                result.failed[name] = error_message or "unknown error"

        if result.faults:
            raise ProvisioningError(
                f"Failed to provision indices: {sorted(result.faults)}", result
            )

        return result

    def ensure_index(self, name: str) -> IndexStatus:
        """Create the index if it does not exist.

        Raises:
            IndexTransportError: If the index service cannot be reached
            IndexRequestError: If the existence check is rejected
        """
        status, _ = self._provision(name)
        return status

    def _provision(self, name: str) -> tuple[IndexStatus, str | None]:
        if self.client.index_exists(name):
            self.logger.info(f"Index {name} already exists.", extra={"index": name})
            return IndexStatus.EXISTING, None

        self.logger.info(f"Index {name} does not exist, creating...", extra={"index": name})

        outcome = self.client.create_index(name)
        if outcome.succeeded:
            self.logger.info(f"Created index {name}.", extra={"index": name})
            return IndexStatus.CREATED, None

        self.logger.error(
            f"Failed to create index {name}. Details: {outcome.error_message}",
            extra={"index": name},
        )
        return IndexStatus.FAILED, outcome.error_message
