from typing import Any, AsyncIterator, Dict, List, Optional

from tracklog.codec import decode_entry, encode_entry, require_utf8
from tracklog.connectors.valkey import ValkeyConnector, store_errors
from tracklog.errors import InvalidInput, NotFound, StorageCorruption
from tracklog.ids import generate_track_id
from tracklog.models import AppendResult, TrackListing, TrackSnapshot
from tracklog.utils.logging import get_logger
from tracklog.utils.metrics import MetricsManager

logger = get_logger("TrackStore")

class TrackStore:
    """
    Append-only event logs ("tracks") stored as Valkey lists.

    Structure: LIST {prefix}{track_id} -> [json entry, ...]

    Every entry is encoded independently, so a track may hold entries of
    different shapes. No locking is done here: RPUSH extends a list
    atomically and concurrent appenders only race on relative order.
    """
    def __init__(self, connector: ValkeyConnector, prefix: str = "track:", scan_batch_size: int = 100):
        if scan_batch_size <= 0:
            raise ValueError("scan_batch_size must be positive")
        self.connector = connector
        self.prefix = prefix
        self.scan_batch_size = scan_batch_size
        self.metrics = MetricsManager()

    def _key(self, track_id: str) -> str:
        return f"{self.prefix}{track_id}"

    def _strip(self, key: str) -> str:
        return key[len(self.prefix):] if key.startswith(self.prefix) else key

    @staticmethod
    def _require_id(track_id: Optional[str]) -> str:
        if not track_id:
            raise InvalidInput("trackId is required")
        return require_utf8(track_id, "trackId")

    async def append(self, track_id: Optional[str], data: Any) -> AppendResult:
        """
        Append one value, or every value of a list, to the tail of a track.

        None elements are dropped. A missing `track_id` creates a new track
        under a generated id.

        Returns:
            AppendResult: the resolved id, how many entries were written and
            the track length as reported by the store afterwards.
        """
        if data is None:
            raise InvalidInput("Track data is required")

        items = list(data) if isinstance(data, (list, tuple)) else [data]
        items = [item for item in items if item is not None]
        if not items:
            raise InvalidInput("Track data contains no non-null entries")

        # Encode everything before touching the store so a bad entry writes nothing
        encoded = [encode_entry(item) for item in items]

        created = not track_id
        target_id = require_utf8(track_id, "trackId") if track_id else generate_track_id()
        key = self._key(target_id)

        client = self.connector.get_client()
        with store_errors("append", "Failed to append track data"):
            await client.rpush(key, *encoded)
            length = await client.llen(key)

        self.metrics.counter("tracklog_entries_appended_total").inc(len(encoded))
        logger.debug(f"Appended {len(encoded)} entries to {key} (length={length})")
        return AppendResult(track_id=target_id, added_count=len(encoded),
                            current_length=length, created=created)

    async def read(self, track_id: str) -> TrackSnapshot:
        """
        Read every entry of a track, oldest first.

        Raises:
            NotFound: the track holds no entries (never created, or deleted).
            StorageCorruption: a stored entry is not valid JSON.
        """
        track_id = self._require_id(track_id)
        key = self._key(track_id)

        with store_errors("read", "Failed to read track"):
            raw = await self.connector.get_client().lrange(key, 0, -1)

        if not raw:
            raise NotFound("Track not found")

        try:
            data = [decode_entry(text, key=key, index=i) for i, text in enumerate(raw)]
        except StorageCorruption as e:
            logger.error(f"CORRUPTION DETECTED: {e.details}", extra={"operation": "read", "track_id": track_id})
            raise
        return TrackSnapshot(track_id=track_id, data=data, length=len(data))

    async def length(self, track_id: str) -> int:
        track_id = self._require_id(track_id)
        with store_errors("length", "Failed to read track length"):
            return await self.connector.get_client().llen(self._key(track_id))

    async def iter_id_batches(self) -> AsyncIterator[List[str]]:
        """
        Yield track ids one SCAN round at a time. Only list keys under the
        prefix count as tracks.

        Starts from cursor 0 and stops when the store hands cursor 0 back, so
        the sequence is finite and can be restarted by calling again. Rounds
        are independent: tracks created or deleted mid-scan may or may not
        show up, and a key may be reported by more than one round.
        """
        client = self.connector.get_client()
        match = f"{self.prefix}*"
        cursor = 0
        while True:
            with store_errors("scan", "Failed to list tracks"):
                cursor, keys = await client.scan(cursor=cursor, match=match, count=self.scan_batch_size, _type="list")
            if keys:
                yield [self._strip(k) for k in keys]
            if int(cursor) == 0:
                break

    async def list_ids(self) -> TrackListing:
        """Collect every track id. Order is whatever the store's scan returns."""
        seen: Dict[str, None] = {}
        async for batch in self.iter_id_batches():
            for track_id in batch:
                seen.setdefault(track_id)
        track_ids = list(seen)
        return TrackListing(total=len(track_ids), track_ids=track_ids)

    async def delete(self, track_id: str) -> bool:
        """Remove a whole track. Returns False if it did not exist."""
        track_id = self._require_id(track_id)
        with store_errors("delete", "Failed to delete track"):
            deleted = await self.connector.get_client().delete(self._key(track_id))
        if deleted:
            logger.info(f"Deleted track {track_id}")
        return deleted > 0
