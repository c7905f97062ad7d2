import pytest

from tracklog.codec import decode_entry, encode_entry, require_utf8
from tracklog.errors import InvalidInput, StorageCorruption

def test_encode_is_compact_and_keeps_unicode():
    assert encode_entry({"event": "click", "n": [1, 2]}) == '{"event":"click","n":[1,2]}'
    assert encode_entry("héllo") == '"héllo"'

def test_nested_values_survive():
    value = {"a": {"b": [1, 2.5, None, True]}, "s": "x"}
    assert decode_entry(encode_entry(value)) == value

def test_rejects_non_json_values():
    with pytest.raises(InvalidInput):
        encode_entry({1, 2})
    with pytest.raises(InvalidInput):
        encode_entry(float("nan"))

def test_decode_failure_is_corruption():
    with pytest.raises(StorageCorruption) as exc_info:
        decode_entry("{not json", key="track:t1", index=3)
    assert exc_info.value.key == "track:t1"
    assert exc_info.value.index == 3
    assert "track:t1[3]" in exc_info.value.details

@pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", "[1,NaN]"])
def test_decode_rejects_non_standard_constants(text):
    with pytest.raises(StorageCorruption):
        decode_entry(text, key="track:n", index=0)

def test_encode_rejects_lone_surrogates():
    with pytest.raises(InvalidInput):
        encode_entry("\ud800")
    with pytest.raises(InvalidInput):
        encode_entry({"k": ["ok", "\udc00"]})

def test_require_utf8_names_the_field():
    assert require_utf8("plain", "key") == "plain"
    with pytest.raises(InvalidInput) as exc_info:
        require_utf8("\ud800", "key")
    assert exc_info.value.message.startswith("key ")
