"""Record Codec — cache key layout and flat JSON wire format."""

import json

import pytest

from app.core.domain_types import NaturalKey, Record
from app.core.record_codec import (
    RecordDecodeError, cache_key, decode_record, encode_record,
)


def test_cache_key_uses_record_prefix():
    assert cache_key(NaturalKey("pikachu")) == "record:pikachu"
    assert cache_key(NaturalKey("pikachu"), prefix="poke:") == "poke:pikachu"


def test_encoded_record_is_flat_json_object():
    record = Record(id=1, name=NaturalKey("pikachu"), height=40, weight=60)
    assert json.loads(encode_record(record)) == {
        "id": 1, "name": "pikachu", "height": 40, "weight": 60,
    }


def test_decode_accepts_bytes_from_redis():
    raw = b'{"id":3,"name":"eevee","height":3,"weight":65}'
    assert decode_record(raw) == Record(
        id=3, name=NaturalKey("eevee"), height=3, weight=65,
    )


def test_decode_allows_missing_id():
    record = decode_record('{"name":"eevee","height":3,"weight":65}')
    assert record.id is None


@pytest.mark.parametrize("raw", [
    "not json",
    "[1, 2]",
    '{"height": 3, "weight": 65}',
    '{"name": "eevee", "height": "3", "weight": 65}',
    '{"name": "eevee", "height": true, "weight": 65}',
    '{"id": "x", "name": "eevee", "height": 3, "weight": 65}',
    b"\xff\xfe",
])
def test_decode_rejects_malformed_payloads(raw):
    with pytest.raises(RecordDecodeError):
        decode_record(raw)


def test_decode_checks_name_against_expected_key():
    raw = '{"id":3,"name":"eevee","height":3,"weight":65}'

    assert decode_record(raw, NaturalKey("eevee")).id == 3
    with pytest.raises(RecordDecodeError):
        decode_record(raw, NaturalKey("pikachu"))
