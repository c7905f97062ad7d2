from contextlib import contextmanager
from typing import Iterator, Optional

import valkey.asyncio as valkey
from valkey.exceptions import ValkeyError

from tracklog.errors import StoreUnavailable
from tracklog.settings import Settings
from tracklog.utils.logging import get_logger

logger = get_logger("ValkeyConnector")

class ValkeyConnector:
    """
    Owns the single async Valkey client shared by the store facades.

    The client is created once by `connect()` (which PINGs the server so a
    bad address fails at startup) and released by `close()`. Usable as an
    async context manager.
    """
    def __init__(self,
                 host: str = 'localhost',
                 port: int = 6379,
                 password: Optional[str] = None,
                 db: int = 0,
                 url: Optional[str] = None):
        self.host = host
        self.port = port
        self.password = password
        self.db = db
        self.url = url
        self._client: Optional[valkey.Valkey] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ValkeyConnector":
        return cls(
            host=settings.VALKEY_HOST,
            port=settings.VALKEY_PORT,
            password=settings.VALKEY_PASSWORD,
            db=settings.VALKEY_DB,
            url=settings.VALKEY_URL,
        )

    @property
    def address(self) -> str:
        return self.url or f"{self.host}:{self.port}/{self.db}"

    async def connect(self) -> None:
        """
        Create the client and verify the server answers.

        Raises:
            StoreUnavailable: if the server cannot be reached.
        """
        if self._client is not None:
            return

        if self.url:
            client = valkey.Valkey.from_url(self.url, decode_responses=True)
        else:
            client = valkey.Valkey(host=self.host, port=self.port, password=self.password,
                                   db=self.db, decode_responses=True)
        try:
            await client.ping()
        except (ValkeyError, OSError) as e:
            logger.error(f"Failed to connect to Valkey at {self.address}: {e}")
            await client.aclose()
            raise StoreUnavailable("Failed to connect to store", details=str(e)) from e

        self._client = client
        logger.info(f"Connected to Valkey at {self.address}")

    def get_client(self) -> valkey.Valkey:
        if self._client is None:
            raise RuntimeError("Connector not connected")
        return self._client

    async def ping(self) -> bool:
        """Returns False instead of raising when the store is unreachable."""
        try:
            return bool(await self.get_client().ping())
        except (ValkeyError, OSError, RuntimeError):
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Valkey connection closed")

    async def __aenter__(self) -> "ValkeyConnector":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


@contextmanager
def store_errors(operation: str, message: str) -> Iterator[None]:
    """
    Wraps a block of store calls, turning transport failures into
    StoreUnavailable. No retries are attempted.
    """
    try:
        yield
    except (ValkeyError, OSError) as e:
        logger.error(f"{operation} failed: {e}", extra={"operation": operation})
        raise StoreUnavailable(message, details=str(e)) from e
