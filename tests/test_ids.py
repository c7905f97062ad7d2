import re
import time
from unittest.mock import patch

from tracklog.ids import ALPHABET, generate_track_id, to_base36

ID_PATTERN = re.compile(r"^[0-9a-z]+-[0-9a-z]{6}$")

def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert to_base36(1700000000000) == "loyw3v28"

def test_generated_id_shape():
    track_id = generate_track_id()
    assert ID_PATTERN.match(track_id), track_id

def test_prefix_is_current_millisecond_timestamp():
    before = int(time.time() * 1000)
    prefix = generate_track_id().split("-")[0]
    after = int(time.time() * 1000)
    assert before - 1 <= int(prefix, 36) <= after + 1

def test_ids_differ():
    ids = {generate_track_id() for _ in range(200)}
    # Collisions are tolerated but vanishingly unlikely at this volume
    assert len(ids) >= 199

def test_falls_back_when_clock_unavailable():
    with patch("tracklog.ids.time.time_ns", side_effect=OSError("no clock")):
        track_id = generate_track_id()
    prefix, suffix = track_id.split("-")
    assert len(prefix) == 8
    assert len(suffix) == 6
    assert all(c in ALPHABET for c in prefix + suffix)
