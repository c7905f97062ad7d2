import asyncio
import logging
from tracklog.connectors.valkey import ValkeyConnector
from tracklog.settings import settings
from tracklog.store import ScalarStore, TrackStore

async def main():
    logging.basicConfig(level=logging.INFO)

    # Initialize the connector using Settings
    connector = ValkeyConnector.from_settings(settings)

    async with connector:
        tracks = TrackStore(connector, prefix=settings.TRACK_KEY_PREFIX, scan_batch_size=settings.SCAN_BATCH_SIZE)
        scalars = ScalarStore(connector)

        # 1. New track with a generated id
        result = await tracks.append(None, {"event": "page_view", "path": "/"})
        print(f"Created track {result.track_id} (length {result.current_length})")

        # 2. Batch append; None entries are dropped
        result = await tracks.append(result.track_id, [{"event": "click", "target": "#buy"}, None, {"event": "checkout"}])
        print(f"Added {result.added_count} entries, length now {result.current_length}")

        # 3. Read it back
        snapshot = await tracks.read(result.track_id)
        for i, entry in enumerate(snapshot.data):
            print(f"  [{i}] {entry}")

        # 4. Enumerate all tracks round by round
        async for batch in tracks.iter_id_batches():
            print(f"Scan round: {batch}")

        # 5. Scalar value with a TTL
        await scalars.set("demo:last_track", result.track_id, ttl_seconds=60)
        print(f"demo:last_track = {await scalars.get('demo:last_track')}")

        await tracks.delete(result.track_id)
        print(f"Deleted {result.track_id}")

if __name__ == "__main__":
    asyncio.run(main())
