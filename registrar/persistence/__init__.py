"""
Persistence module: JSON data files and full-graph backups.
"""

from .json_store import JsonStore, SaveReport, DATA_FILES
from .snapshot_manager import SnapshotManager, Snapshot, encode_snapshot, decode_snapshot

__all__ = [
    "JsonStore",
    "SaveReport",
    "DATA_FILES",
    "SnapshotManager",
    "Snapshot",
    "encode_snapshot",
    "decode_snapshot",
]
