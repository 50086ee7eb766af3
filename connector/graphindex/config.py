"""
Configuration management for the GraphIndex connector.

All configuration is done via environment variables - no config files inside containers.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for local development
    - Configuration objects are frozen and read-only after construction
    - Secrets are never logged or exposed in error messages

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Changing INDEX_KEY_PROPERTY or INDEX_PREFIX requires a full reindex
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

# Elasticsearch rejects uppercase, these characters, and a leading - _ +
_INVALID_INDEX_CHARS = re.compile(r'[\\/*?"<>| ,#:]')


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class MappingKind(Enum):
    """Supported document mapping strategies."""

    DEFAULT = "default"
    LABELLED = "labelled"


@dataclass(frozen=True)
class MappingConfig:
    """How graph entities are mapped to search documents.

    Attributes:
        key_property: Property whose value becomes the document id
        index_prefix: Prefix (or full name) of the target indices
        kind: Mapping strategy to use
        strict_keys: Reject entities without the key property instead of
            indexing them under the literal id "null"
        normalize_to_string: Store every property value as a string
    """

    key_property: str = "uuid"
    index_prefix: str = "neo4j-index"
    kind: MappingKind = MappingKind.DEFAULT
    strict_keys: bool = True
    normalize_to_string: bool = False

    @classmethod
    def from_env(cls) -> MappingConfig:
        """Load configuration from environment variables."""
        kind_str = os.getenv("INDEX_MAPPING", "default").lower()
        try:
            kind = MappingKind(kind_str)
        except ValueError:
            raise ValueError(
                f"Invalid INDEX_MAPPING '{kind_str}'. Must be one of: "
                + ", ".join(k.value for k in MappingKind)
            )

        return cls(
            key_property=os.getenv("INDEX_KEY_PROPERTY", "uuid"),
            index_prefix=os.getenv("INDEX_PREFIX", "neo4j-index"),
            kind=kind,
            strict_keys=_env_bool("INDEX_STRICT_KEYS", "true"),
            normalize_to_string=_env_bool("INDEX_NORMALIZE_TO_STRING", "false"),
        )


@dataclass(frozen=True)
class ElasticsearchConfig:
    """Elasticsearch connection configuration.

    Attributes:
        hosts: Comma-separated list of node URLs
        username: Basic auth username
        password: Basic auth password
        api_key: API key (takes precedence over basic auth)
        request_timeout: Per-request timeout in seconds
        verify_certs: Whether to verify TLS certificates
        number_of_shards: Shards for indices created by the connector
        number_of_replicas: Replicas for indices created by the connector
    """

    hosts: str = "http://localhost:9200"
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    request_timeout: float = 10.0
    verify_certs: bool = True
    number_of_shards: int | None = None
    number_of_replicas: int | None = None

    @property
    def host_list(self) -> list[str]:
        return [h.strip() for h in self.hosts.split(",") if h.strip()]

    @property
    def index_settings(self) -> dict[str, int]:
        """Settings sent with create-index requests."""
        settings = {}
        if self.number_of_shards is not None:
            settings["number_of_shards"] = self.number_of_shards
        if self.number_of_replicas is not None:
            settings["number_of_replicas"] = self.number_of_replicas
        return settings

    @classmethod
    def from_env(cls) -> ElasticsearchConfig:
        """Load configuration from environment variables."""
        shards = os.getenv("ES_NUMBER_OF_SHARDS")
        replicas = os.getenv("ES_NUMBER_OF_REPLICAS")
        return cls(
            hosts=os.getenv("ES_HOSTS", "http://localhost:9200"),
            username=os.getenv("ES_USERNAME"),
            password=os.getenv("ES_PASSWORD"),
            api_key=os.getenv("ES_API_KEY"),
            request_timeout=float(os.getenv("ES_REQUEST_TIMEOUT", "10")),
            verify_certs=_env_bool("ES_VERIFY_CERTS", "true"),
            number_of_shards=int(shards) if shards else None,
            number_of_replicas=int(replicas) if replicas else None,
        )


@dataclass(frozen=True)
class ProvisioningConfig:
    """Index provisioning configuration.

    Attributes:
        fail_fast: Abort on the first transport fault (all-or-nothing).
            When false every index is attempted and faults are reported
            together at the end.
    """

    fail_fast: bool = True

    @classmethod
    def from_env(cls) -> ProvisioningConfig:
        """Load configuration from environment variables."""
        return cls(fail_fast=_env_bool("PROVISION_FAIL_FAST", "true"))


@dataclass(frozen=True)
class SyncConfig:
    """Synchronization loop configuration.

    Attributes:
        batch_size: Maximum number of write operations per bulk request
    """

    batch_size: int = 500

    @classmethod
    def from_env(cls) -> SyncConfig:
        """Load configuration from environment variables."""
        return cls(batch_size=int(os.getenv("SYNC_BATCH_SIZE", "500")))


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json"),
        )


@dataclass
class ConnectorConfig:
    """Complete connector configuration.

    Attributes:
        mapping: Document mapping configuration
        elasticsearch: Elasticsearch connection configuration
        provisioning: Index provisioning configuration
        sync: Synchronization loop configuration
        observability: Logging configuration
    """

    mapping: MappingConfig = field(default_factory=MappingConfig)
    elasticsearch: ElasticsearchConfig = field(default_factory=ElasticsearchConfig)
    provisioning: ProvisioningConfig = field(default_factory=ProvisioningConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> ConnectorConfig:
        """Load complete configuration from environment variables.

        Raises:
            ValueError: If required configuration is missing or invalid.
        """
        config = cls(
            mapping=MappingConfig.from_env(),
            elasticsearch=ElasticsearchConfig.from_env(),
            provisioning=ProvisioningConfig.from_env(),
            sync=SyncConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )

        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not self.mapping.key_property:
            raise ValueError("INDEX_KEY_PROPERTY must not be empty")

        prefix = self.mapping.index_prefix
        if not prefix:
            raise ValueError("INDEX_PREFIX must not be empty")
        if prefix != prefix.lower():
            raise ValueError(f"INDEX_PREFIX must be lowercase, got '{prefix}'")
        if prefix[0] in "-_+" or _INVALID_INDEX_CHARS.search(prefix):
            raise ValueError(f"INDEX_PREFIX is not a valid index name: '{prefix}'")

        if not self.elasticsearch.host_list:
            raise ValueError("ES_HOSTS must list at least one host")

        if self.sync.batch_size <= 0:
            raise ValueError("SYNC_BATCH_SIZE must be positive")

    def log_config(self) -> None:
        """Log configuration (redacting secrets)."""
        logger.info(
            "Connector configuration loaded",
            extra={
                "key_property": self.mapping.key_property,
                "index_prefix": self.mapping.index_prefix,
                "mapping": self.mapping.kind.value,
                "strict_keys": self.mapping.strict_keys,
                "es_hosts": self.elasticsearch.host_list,
                "es_auth": "api_key"
                if self.elasticsearch.api_key
                else ("basic" if self.elasticsearch.username else None),
                "provision_fail_fast": self.provisioning.fail_fast,
                "batch_size": self.sync.batch_size,
                "log_level": self.observability.log_level,
            },
        )
