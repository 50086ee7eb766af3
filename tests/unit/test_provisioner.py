"""
Unit tests for IndexProvisioner.

Tests cover:
- Existing indices are left alone
- Missing indices are created
- Refused creations are reported, not raised
- Transport faults in fail-fast and best-effort modes
- De-duplication of index names
"""

import logging

import pytest

from connector.graphindex.config import MappingConfig, MappingKind
from connector.graphindex.index.client import IndexRequestError
from connector.graphindex.index.memory import InMemoryIndexClient
from connector.graphindex.index.provisioner import (
    IndexProvisioner,
    IndexStatus,
    ProvisioningError,
)
from connector.graphindex.mapping import create_mapping


class TestEnsureIndex:
    """Tests for ensure_index."""

    def test_existing_index_not_created(self):
        """An existing index is never created again."""
        client = InMemoryIndexClient(existing=["people"])

        status = IndexProvisioner(client).ensure_index("people")

        assert status == IndexStatus.EXISTING
        assert client.calls["create_index"] == []

    def test_missing_index_created(self):
        """A missing index is created."""
        client = InMemoryIndexClient()

        status = IndexProvisioner(client).ensure_index("people")

        assert status == IndexStatus.CREATED
        assert client.indices == ["people"]

    def test_refused_creation_is_logged(self, caplog):
        """A refused creation is logged as an error and not raised."""
        client = InMemoryIndexClient(reject_create=["people"])

        with caplog.at_level(logging.ERROR):
            status = IndexProvisioner(client).ensure_index("people")

        assert status == IndexStatus.FAILED
        assert "Failed to create index people" in caplog.text
        assert client.indices == []


class TestEnsureIndices:
    """Tests for ensure_indices."""

    def test_duplicates_checked_once(self):
        """Repeated names are provisioned once."""
        client = InMemoryIndexClient()

        result = IndexProvisioner(client).ensure_indices(["idxA", "idxA"])

        assert client.calls["index_exists"] == ["idxA"]
        assert client.calls["create_index"] == ["idxA"]
        assert result.created == ["idxA"]

    def test_mixed_outcomes(self):
        """Each name's outcome is recorded."""
        client = InMemoryIndexClient(existing=["a"], reject_create=["c"])

        result = IndexProvisioner(client).ensure_indices(["a", "b", "c"])

        assert result.existing == ["a"]
        assert result.created == ["b"]
        assert result.failed == {"c": "index [c] creation rejected"}
        assert result.ready == ["a", "b"]
        assert not result.ok

    def test_fail_fast_aborts_remaining(self):
        """The first transport fault stops provisioning."""
        client = InMemoryIndexClient(fail_transport=["b"])

        with pytest.raises(ProvisioningError) as exc_info:
            IndexProvisioner(client).ensure_indices(["a", "b", "c", "d"])

        result = exc_info.value.result
        assert result.created == ["a"]
        assert list(result.faults) == ["b"]
        assert result.skipped == ["c", "d"]
        assert client.calls["index_exists"] == ["a", "b"]

    def test_rejected_check_is_a_fault(self):
        """A rejected existence check stops provisioning like a transport fault."""
        client = InMemoryIndexClient(reject_exists=["a"])

        with pytest.raises(ProvisioningError) as exc_info:
            IndexProvisioner(client).ensure_indices(["a", "b"])

        result = exc_info.value.result
        assert isinstance(result.faults["a"], IndexRequestError)
        assert result.skipped == ["b"]
        assert client.calls["create_index"] == []

    def test_best_effort_attempts_all(self):
        """Best-effort mode tries every name and reports faults together."""
        client = InMemoryIndexClient(fail_transport=["b", "d"])

        with pytest.raises(ProvisioningError) as exc_info:
            IndexProvisioner(client, fail_fast=False).ensure_indices(["a", "b", "c", "d"])

        result = exc_info.value.result
        assert result.created == ["a", "c"]
        assert sorted(result.faults) == ["b", "d"]
        assert result.skipped == []

    def test_fault_is_chained(self):
        """ProvisioningError keeps the transport fault as its cause."""
        client = InMemoryIndexClient(fail_transport=["a"])

        with pytest.raises(ProvisioningError) as exc_info:
            IndexProvisioner(client).ensure_indices(["a"])

        assert exc_info.value.__cause__ is exc_info.value.result.faults["a"]

    def test_all_existing_is_ok(self):
        """Nothing to create is a clean result."""
        client = InMemoryIndexClient(existing=["a", "b"])

        result = IndexProvisioner(client).ensure_indices(["a", "b"])

        assert result.ok
        assert client.calls["create_index"] == []


class TestEnsureIndicesFor:
    """Tests for ensure_indices_for."""

    def test_default_mapping_two_indices(self):
        """Per-kind indices are both provisioned."""
        client = InMemoryIndexClient()
        mapping = create_mapping(MappingConfig(index_prefix="graph"))

        result = IndexProvisioner(client).ensure_indices_for(mapping)

        assert result.created == ["graph-node", "graph-relationship"]

    def test_shared_index_provisioned_once(self):
        """Kinds resolving to one index cause one provisioning attempt."""
        client = InMemoryIndexClient()
        mapping = create_mapping(MappingConfig(index_prefix="graph", kind=MappingKind.LABELLED))

        result = IndexProvisioner(client).ensure_indices_for(mapping)

        assert result.created == ["graph"]
        assert client.calls["index_exists"] == ["graph"]
