"""
Shared fixtures for the GraphIndex test suite.
"""

import pytest

from connector.graphindex.config import MappingConfig
from connector.graphindex.events.types import EntitySnapshot


@pytest.fixture
def mapping_config():
    """Mapping configuration keyed on 'uuid' with a test prefix."""
    return MappingConfig(key_property="uuid", index_prefix="graph")


@pytest.fixture
def person():
    """A node snapshot with scalar and list properties."""
    return EntitySnapshot.node(
        "1",
        {"uuid": "p1", "name": "Alice", "age": 34, "tags": ["admin", "ops"]},
        labels=["Person", "Employee"],
    )


@pytest.fixture
def friendship():
    """A relationship snapshot."""
    return EntitySnapshot.relationship(
        "10",
        {"uuid": "r9", "since": 2019},
        rel_type="FRIEND_OF",
        start_id="1",
        end_id="2",
    )
