"""
Mapping module for the GraphIndex connector - graph events to index actions.

This module handles:
- Building search documents from entity snapshots
- Mapping strategies (per-kind indices, or one labelled index)
- Dispatching write operations to the strategy's handlers

Invariants:
    - Documents never contain the key property
    - Document ids are the string form of the key property value
    - Each known operation kind reaches exactly one handler

How to change safely:
    - New strategies implement IndexMapping and register in create_mapping
    - Verify key exclusion and list handling for any new normalizer
"""

from .actions import ActionType, BulkAction, Document
from .base import IndexMapping, create_mapping
from .default import DefaultMapping
from .dispatch import OperationDispatcher
from .document import (
    DocumentBuilder,
    InvalidKeyPropertyError,
    MappingError,
    MissingKeyPropertyError,
    stringify,
)
from .labelled import LabelledMapping

__all__ = [
    # Actions
    "ActionType",
    "BulkAction",
    "Document",
    # Documents
    "DocumentBuilder",
    "MappingError",
    "MissingKeyPropertyError",
    "InvalidKeyPropertyError",
    "stringify",
    # Strategies
    "IndexMapping",
    "create_mapping",
    "DefaultMapping",
    "LabelledMapping",
    # Dispatch
    "OperationDispatcher",
]
