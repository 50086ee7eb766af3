"""
Unit tests for the Elasticsearch index client adapter.

The Elasticsearch client is replaced by a mock; these tests cover the
translation of responses and errors into the IndexClient contract.
"""

from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import AuthenticationException, BadRequestError
from elasticsearch import ConnectionError as EsConnectionError

from connector.graphindex.config import ElasticsearchConfig
from connector.graphindex.index.client import IndexRequestError, IndexTransportError
from connector.graphindex.index.es_client import ElasticsearchIndexClient
from connector.graphindex.mapping.actions import BulkAction


def api_error(cls, status, message):
    """An elasticsearch ApiError as raised for an answered request."""
    return cls(message=message, meta=MagicMock(status=status), body={"error": message})


class TestElasticsearchIndexClient:
    """Tests for ElasticsearchIndexClient."""

    @pytest.fixture
    def es(self):
        return MagicMock()

    @pytest.fixture
    def client(self, es):
        return ElasticsearchIndexClient(es, index_settings={"number_of_shards": 1})

    def test_index_exists(self, client, es):
        """exists() result is passed through as a bool."""
        es.indices.exists.return_value = True

        assert client.index_exists("graph-node") is True
        es.indices.exists.assert_called_once_with(index="graph-node")

    def test_index_exists_transport_fault(self, client, es):
        """Connection errors become IndexTransportError."""
        es.indices.exists.side_effect = EsConnectionError("connection refused")

        with pytest.raises(IndexTransportError):
            client.index_exists("graph-node")

    def test_index_exists_rejected(self, client, es):
        """Error statuses on the existence check become IndexRequestError."""
        es.indices.exists.side_effect = api_error(
            AuthenticationException, 401, "security_exception"
        )

        with pytest.raises(IndexRequestError) as exc_info:
            client.index_exists("graph-node")

        assert "401" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, AuthenticationException)

    def test_create_index(self, client, es):
        """Acknowledged creation succeeds and sends settings."""
        es.indices.create.return_value = {"acknowledged": True, "index": "graph-node"}

        result = client.create_index("graph-node")

        assert result.succeeded
        es.indices.create.assert_called_once_with(
            index="graph-node", settings={"number_of_shards": 1}
        )

    def test_create_index_not_acknowledged(self, client, es):
        """Unacknowledged creation is a logical failure."""
        es.indices.create.return_value = {"acknowledged": False}

        result = client.create_index("graph-node")

        assert not result.succeeded
        assert "not acknowledged" in result.error_message

    def test_create_index_refused(self, client, es):
        """Error statuses on create are logical failures."""
        es.indices.create.side_effect = api_error(
            BadRequestError, 400, "resource_already_exists_exception"
        )

        result = client.create_index("graph-node")

        assert not result.succeeded
        assert "resource_already_exists_exception" in result.error_message

    def test_create_index_transport_fault(self, client, es):
        """Connection errors during create become IndexTransportError."""
        es.indices.create.side_effect = EsConnectionError("timed out")

        with pytest.raises(IndexTransportError):
            client.create_index("graph-node")

    def test_bulk(self, client, es):
        """Actions are rendered and sent through helpers.bulk."""
        actions = [
            BulkAction.index_document("graph-node", "k1", {"name": "Bob"}),
            BulkAction.delete("graph-node", "k2"),
        ]

        with patch("connector.graphindex.index.es_client.bulk") as bulk:
            bulk.return_value = (1, [{"delete": {"_id": "k2", "status": 404}}])
            result = client.bulk(actions)

        bulk.assert_called_once_with(
            es, [a.to_bulk_dict() for a in actions], raise_on_error=False
        )
        assert result.succeeded == 1
        assert not result.ok

    def test_bulk_empty(self, client):
        """No request is made for an empty batch."""
        with patch("connector.graphindex.index.es_client.bulk") as bulk:
            result = client.bulk([])

        bulk.assert_not_called()
        assert result.succeeded == 0

    def test_bulk_transport_fault(self, client):
        """Connection errors during bulk become IndexTransportError."""
        with patch("connector.graphindex.index.es_client.bulk") as bulk:
            bulk.side_effect = EsConnectionError("connection reset")
            with pytest.raises(IndexTransportError):
                client.bulk([BulkAction.delete("graph-node", "k1")])

    def test_bulk_rejected(self, client):
        """An error status for the whole bulk request becomes IndexRequestError."""
        with patch("connector.graphindex.index.es_client.bulk") as bulk:
            bulk.side_effect = api_error(AuthenticationException, 401, "security_exception")
            with pytest.raises(IndexRequestError):
                client.bulk([BulkAction.delete("graph-node", "k1")])

    def test_from_config(self):
        """from_config passes hosts, auth and settings."""
        config = ElasticsearchConfig(
            hosts="http://es1:9200,http://es2:9200",
            username="elastic",
            password="secret",
            number_of_replicas=0,
        )

        with patch("connector.graphindex.index.es_client.Elasticsearch") as es_cls:
            client = ElasticsearchIndexClient.from_config(config)

        es_cls.assert_called_once_with(
            ["http://es1:9200", "http://es2:9200"],
            request_timeout=10.0,
            verify_certs=True,
            basic_auth=("elastic", "secret"),
        )
        assert client.index_settings == {"number_of_replicas": 0}
