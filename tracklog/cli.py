import asyncio
import json
from typing import Any, Awaitable, Callable

import httpx
import typer
import uvicorn

from tracklog.api import create_app
from tracklog.connectors.valkey import ValkeyConnector
from tracklog.errors import TrackLogError
from tracklog.settings import settings
from tracklog.store import TrackStore
from tracklog.utils.logging import setup_logging

app = typer.Typer(help="tracklog control interface")

def _run(action: Callable[[TrackStore], Awaitable[Any]]) -> Any:
    """Connects, runs one store action and exits non-zero on a store error."""
    async def _inner():
        async with ValkeyConnector.from_settings(settings) as connector:
            store = TrackStore(connector, prefix=settings.TRACK_KEY_PREFIX,
                               scan_batch_size=settings.SCAN_BATCH_SIZE)
            return await action(store)
    try:
        return asyncio.run(_inner())
    except TrackLogError as e:
        typer.echo(f"Error: {e.message}" + (f" ({e.details})" if e.details else ""), err=True)
        raise typer.Exit(code=1)

@app.command()
def serve(
    host: str = typer.Option(settings.API_HOST, help="Bind address"),
    port: int = typer.Option(settings.API_PORT, help="Bind port"),
):
    """
    Runs the HTTP API. Exits if Valkey is unreachable at startup.
    """
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)

@app.command("list")
def list_tracks(
    batches: bool = typer.Option(False, help="Print one line per SCAN round"),
):
    """
    Lists every track id.
    """
    async def _list(store: TrackStore):
        if batches:
            n = 0
            async for batch in store.iter_id_batches():
                n += 1
                typer.echo(f"[round {n}] {' '.join(batch)}")
            return
        listing = await store.list_ids()
        for track_id in listing.track_ids:
            typer.echo(track_id)
        typer.echo(f"--- {listing.total} track(s) ---")

    _run(_list)

@app.command()
def show(
    track_id: str = typer.Argument(..., help="Track to print"),
    limit: int = typer.Option(0, help="Only show the last N entries (0 = all)"),
):
    """
    Prints the entries of a track, one JSON document per line.
    """
    async def _show(store: TrackStore):
        snapshot = await store.read(track_id)
        entries = snapshot.data[-limit:] if limit > 0 else snapshot.data
        offset = snapshot.length - len(entries)
        for i, entry in enumerate(entries):
            typer.echo(f"[{offset + i}] {json.dumps(entry, ensure_ascii=False)}")
        typer.echo(f"--- {snapshot.track_id}: {snapshot.length} entries ---")

    _run(_show)

@app.command()
def length(track_id: str = typer.Argument(..., help="Track to measure")):
    """
    Prints the number of entries in a track (0 if it does not exist).
    """
    typer.echo(_run(lambda store: store.length(track_id)))

@app.command()
def append(
    data: str = typer.Argument(..., help="JSON value, or a JSON array of values"),
    track_id: str = typer.Option("", "--track-id", "-t", help="Existing track (default: create one)"),
):
    """
    Appends JSON data to a track.
    """
    try:
        value = json.loads(data)
    except ValueError as e:
        typer.echo(f"Error: invalid JSON: {e}", err=True)
        raise typer.Exit(code=1)

    result = _run(lambda store: store.append(track_id or None, value))
    typer.echo(f"{result.track_id}: +{result.added_count} (length {result.current_length})")

@app.command()
def delete(track_id: str = typer.Argument(..., help="Track to delete")):
    """
    Deletes a track.
    """
    if _run(lambda store: store.delete(track_id)):
        typer.echo(f"Deleted {track_id}")
    else:
        typer.echo(f"{track_id} does not exist")

@app.command()
def status(url: str = typer.Option("http://localhost:8000", help="URL of a running tracklog API")):
    """
    Checks the health endpoint of a running API.
    """
    try:
        r = httpx.get(f"{url}/health")
        if r.status_code == 200:
            typer.echo(f"✅ API Online: {r.json()}")
        else:
            typer.echo(f"⚠️  API returned {r.status_code}: {r.text}")
            raise typer.Exit(code=1)
    except httpx.RequestError as e:
        typer.echo(f"❌ Failed to connect to {url}: {e}")
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
