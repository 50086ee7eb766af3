"""
GraphIndex Test Suite.

This package contains:
- unit/: Unit tests (no external services, Elasticsearch client mocked)
- integration/: Integration tests (synchronizer with in-memory index client)
"""
