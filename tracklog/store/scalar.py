from typing import Any, Optional

from tracklog.codec import encode_entry, require_utf8
from tracklog.connectors.valkey import ValkeyConnector, store_errors
from tracklog.errors import InvalidInput

class ScalarStore:
    """
    Plain key/value access. Keys are used verbatim (no prefix).
    Expiry is delegated to the store via SET EX.
    """
    def __init__(self, connector: ValkeyConnector):
        self.connector = connector

    @staticmethod
    def _require_key(key: Optional[str]) -> str:
        if not key:
            raise InvalidInput("key is required")
        return require_utf8(key, "key")

    async def get(self, key: str) -> Optional[str]:
        key = self._require_key(key)
        with store_errors("kv_get", "Failed to get value"):
            return await self.connector.get_client().get(key)

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """
        Store `value` under `key`. Strings are stored as is, any other JSON
        value as its JSON text. A falsy `ttl_seconds` means no expiry.
        """
        key = self._require_key(key)
        if value is None:
            raise InvalidInput("key and value are required")
        if ttl_seconds is not None and ttl_seconds < 0:
            raise InvalidInput("expiresIn must be a positive number of seconds")

        payload = require_utf8(value, "value") if isinstance(value, str) else encode_entry(value, "value")
        with store_errors("kv_set", "Failed to save value"):
            await self.connector.get_client().set(key, payload, ex=ttl_seconds or None)

    async def delete(self, key: str) -> bool:
        key = self._require_key(key)
        with store_errors("kv_delete", "Failed to delete value"):
            deleted = await self.connector.get_client().delete(key)
        return deleted > 0
