import json
from typing import Any, NoReturn

from tracklog.errors import InvalidInput, StorageCorruption

def _reject_constant(token: str) -> NoReturn:
    raise ValueError(f"non-standard JSON constant {token!r}")

def require_utf8(text: str, field: str) -> str:
    """Lone surrogates survive JSON decoding but cannot be sent to the store."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidInput(f"{field} is not valid UTF-8 text: {e.reason}") from e
    return text

def encode_entry(value: Any, field: str = "Track data") -> str:
    """
    Serialize a log entry to compact JSON text.

    Only plain JSON values are accepted (None, bool, int, float, str, list,
    tuple, dict with str keys). NaN/Infinity and unpaired surrogates are
    rejected.
    """
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{field} is not JSON serializable: {e}") from e
    return require_utf8(text, field)

def decode_entry(text: str, key: str = "", index: int = -1) -> Any:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        raise StorageCorruption("Failed to read track data", details=f"{key}[{index}]: {e}",
                                key=key, index=index) from e
