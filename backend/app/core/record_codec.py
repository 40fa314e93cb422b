"""Record Codec — flat JSON wire format for cached records and cache key layout.

Invariants:
    - encode_record output is a flat JSON object: {"id", "name", "height", "weight"}
    - decode_record rejects anything else with RecordDecodeError (never a partial Record)
    - An entry whose name differs from the key it was read under is rejected the same way
    - cache_key(prefix, key) == prefix + key; the key is already normalized

Design Decisions:
    - Pure functions, no IO: the Redis adapter owns transport, this module owns format
    - bool rejected for integer fields: json accepts true/false where int expected
"""

import json

from app.core.domain_types import NaturalKey, Record

DEFAULT_KEY_PREFIX = "record:"


class RecordDecodeError(ValueError):
    """Cached payload is not a valid serialized Record."""


def cache_key(key: NaturalKey, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    return f"{prefix}{key}"


def encode_record(record: Record) -> str:
    return json.dumps(
        {
            "id": record.id,
            "name": record.name,
            "height": record.height,
            "weight": record.weight,
        },
        separators=(",", ":"),
    )


def decode_record(raw: str | bytes, key: NaturalKey | None = None) -> Record:
    """Parse a cached payload back into a Record.

    When key is given, the payload must belong to it.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordDecodeError(f"Cached record is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise RecordDecodeError("Cached record is not a JSON object")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise RecordDecodeError("Cached record has no name")
    if key is not None and name != key:
        raise RecordDecodeError(f"Cached record name '{name}' does not match key '{key}'")
    for field in ("height", "weight"):
        if not _is_int(data.get(field)):
            raise RecordDecodeError(f"Cached record field '{field}' is not an integer")
    record_id = data.get("id")
    if record_id is not None and not _is_int(record_id):
        raise RecordDecodeError("Cached record field 'id' is not an integer")

    return Record(
        id=record_id,
        name=NaturalKey(name),
        height=data["height"],
        weight=data["weight"],
    )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
