"""
Unit tests for connector configuration.
"""

import pytest

from connector.graphindex.config import (
    ConnectorConfig,
    ElasticsearchConfig,
    MappingConfig,
    MappingKind,
    SyncConfig,
)


class TestFromEnv:
    """Tests for loading configuration from the environment."""

    def test_defaults(self, monkeypatch):
        """Defaults apply when nothing is set."""
        for name in (
            "INDEX_KEY_PROPERTY",
            "INDEX_PREFIX",
            "INDEX_MAPPING",
            "INDEX_STRICT_KEYS",
            "ES_HOSTS",
            "PROVISION_FAIL_FAST",
            "SYNC_BATCH_SIZE",
        ):
            monkeypatch.delenv(name, raising=False)

        config = ConnectorConfig.from_env()

        assert config.mapping.key_property == "uuid"
        assert config.mapping.index_prefix == "neo4j-index"
        assert config.mapping.kind == MappingKind.DEFAULT
        assert config.mapping.strict_keys is True
        assert config.elasticsearch.host_list == ["http://localhost:9200"]
        assert config.provisioning.fail_fast is True

    def test_overrides(self, monkeypatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("INDEX_KEY_PROPERTY", "id")
        monkeypatch.setenv("INDEX_PREFIX", "social")
        monkeypatch.setenv("INDEX_MAPPING", "LABELLED")
        monkeypatch.setenv("INDEX_STRICT_KEYS", "false")
        monkeypatch.setenv("ES_HOSTS", "http://es1:9200, http://es2:9200")
        monkeypatch.setenv("ES_NUMBER_OF_SHARDS", "3")
        monkeypatch.setenv("PROVISION_FAIL_FAST", "false")
        monkeypatch.setenv("SYNC_BATCH_SIZE", "50")

        config = ConnectorConfig.from_env()

        assert config.mapping == MappingConfig(
            key_property="id",
            index_prefix="social",
            kind=MappingKind.LABELLED,
            strict_keys=False,
        )
        assert config.elasticsearch.host_list == ["http://es1:9200", "http://es2:9200"]
        assert config.elasticsearch.index_settings == {"number_of_shards": 3}
        assert config.provisioning.fail_fast is False
        assert config.sync.batch_size == 50

    def test_invalid_mapping_kind(self, monkeypatch):
        """Unknown mapping kinds are rejected."""
        monkeypatch.setenv("INDEX_MAPPING", "fancy")

        with pytest.raises(ValueError, match="INDEX_MAPPING"):
            ConnectorConfig.from_env()


class TestValidate:
    """Tests for ConnectorConfig.validate."""

    @pytest.mark.parametrize("prefix", ["", "Graph", "_graph", "-graph", "gr aph", "a/b", "x*"])
    def test_invalid_prefixes(self, prefix):
        """Prefixes must be valid index names."""
        config = ConnectorConfig(mapping=MappingConfig(index_prefix=prefix))

        with pytest.raises(ValueError):
            config.validate()

    def test_empty_key_property(self):
        """The key property is required."""
        with pytest.raises(ValueError, match="INDEX_KEY_PROPERTY"):
            ConnectorConfig(mapping=MappingConfig(key_property="")).validate()

    def test_batch_size_positive(self):
        """Batch size must be positive."""
        with pytest.raises(ValueError, match="SYNC_BATCH_SIZE"):
            ConnectorConfig(sync=SyncConfig(batch_size=0)).validate()

    def test_no_hosts(self):
        """At least one host is required."""
        with pytest.raises(ValueError, match="ES_HOSTS"):
            ConnectorConfig(elasticsearch=ElasticsearchConfig(hosts=" , ")).validate()

    def test_mapping_config_is_frozen(self):
        """Mapping configuration cannot change after construction."""
        config = MappingConfig()

        with pytest.raises(AttributeError):
            config.key_property = "id"
