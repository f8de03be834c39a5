"""Record store collaborators: in-memory store and JSON snapshots."""

from .memory import RecordStore
from .snapshot import Snapshot, load_snapshot, save_snapshot

__all__ = ["RecordStore", "Snapshot", "load_snapshot", "save_snapshot"]
