from tracklog.store.scalar import ScalarStore
from tracklog.store.tracks import TrackStore

__all__ = ["ScalarStore", "TrackStore"]
