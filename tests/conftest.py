import fnmatch
from typing import Any, Dict, List, Optional, Tuple

import pytest
from valkey.exceptions import ConnectionError as ValkeyConnectionError

from tracklog.connectors.valkey import ValkeyConnector


class FakeValkey:
    """
    In-memory stand-in for the async Valkey client, covering the commands
    tracklog issues. SCAN really paginates so cursor handling is exercised.
    """

    def __init__(self) -> None:
        self.strings: Dict[str, str] = {}
        self.lists: Dict[str, List[str]] = {}
        self.expiries: Dict[str, Optional[int]] = {}
        self.scan_calls: List[Tuple[int, Optional[str], Optional[int]]] = []
        self.closed = False
        self._should_fail = False

    def set_failure_mode(self, should_fail: bool) -> None:
        self._should_fail = should_fail

    def _check(self) -> None:
        if self._should_fail:
            raise ValkeyConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def ping(self) -> bool:
        self._check()
        return True

    async def rpush(self, key: str, *values: str) -> int:
        self._check()
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    async def llen(self, key: str) -> int:
        self._check()
        return len(self.lists.get(key, []))

    async def lrange(self, key: str, start: int, end: int) -> List[str]:
        self._check()
        items = self.lists.get(key, [])
        return list(items[start:] if end == -1 else items[start:end + 1])

    async def scan(self, cursor: int = 0, match: Optional[str] = None, count: Optional[int] = None,
                   _type: Optional[str] = None) -> Tuple[int, List[str]]:
        self._check()
        self.scan_calls.append((cursor, match, count))
        keys = sorted(set(self.strings) | set(self.lists))
        step = count or 10
        window = keys[cursor:cursor + step]
        next_cursor = cursor + step if cursor + step < len(keys) else 0
        if match:
            window = [k for k in window if fnmatch.fnmatchcase(k, match)]
        if _type == "list":
            window = [k for k in window if k in self.lists]
        elif _type == "string":
            window = [k for k in window if k in self.strings]
        return next_cursor, window

    async def get(self, key: str) -> Optional[str]:
        self._check()
        return self.strings.get(key)

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self._check()
        self.strings[key] = value
        self.expiries[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.lists.pop(key, None) is not None:
                removed += 1
            if self.strings.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_valkey() -> FakeValkey:
    return FakeValkey()


@pytest.fixture
def connector(fake_valkey: FakeValkey) -> ValkeyConnector:
    """A connector that is already 'connected' to the in-memory fake."""
    conn = ValkeyConnector()
    conn._client = fake_valkey
    return conn
