import random
import string
import time

ALPHABET = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 6
# Width of a base36 millisecond timestamp until the year 2059
FALLBACK_PREFIX_LENGTH = 8

def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))

def _random_chars(length: int) -> str:
    return "".join(random.choices(ALPHABET, k=length))

def generate_track_id() -> str:
    """
    Returns `<base36 ms timestamp>-<6 random base36 chars>`.

    Not cryptographically secure. Two calls within the same millisecond
    collide with probability 1/36**6; a collision only interleaves entries.
    """
    try:
        prefix = to_base36(time.time_ns() // 1_000_000)
    except (OSError, OverflowError, ValueError):
        prefix = _random_chars(FALLBACK_PREFIX_LENGTH)
    return f"{prefix}-{_random_chars(SUFFIX_LENGTH)}"
