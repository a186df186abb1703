"""
Readers turning backend or snapshot collections into typed records.
"""

from .record_reader import ENTITY_MODELS, parse_records
from .snapshot_reader import SnapshotError, SnapshotReader

__all__ = ["ENTITY_MODELS", "parse_records", "SnapshotError", "SnapshotReader"]
