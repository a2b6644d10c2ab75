"""Canonical JSON encoding for stored state.

Dates survive a round trip: ``datetime`` and ``date`` values are written as
single-key tagged objects and turned back into the same type on decode.
Mappings (read-only views included), dataclasses and enums are written as
their plain JSON equivalents.
"""

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

_DATETIME_TAG = "__datetime__"
_DATE_TAG = "__date__"


class _StateEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        # datetime is a subclass of date, check it first.
        if isinstance(o, datetime):
            return {_DATETIME_TAG: o.isoformat()}
        if isinstance(o, date):
            return {_DATE_TAG: o.isoformat()}
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, Mapping):
            return dict(o)
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return {f.name: getattr(o, f.name) for f in dataclasses.fields(o)}
        if isinstance(o, set | frozenset):
            return sorted(o)
        return super().default(o)


def _decode_tagged(obj: dict[str, Any]) -> Any:
    if len(obj) == 1:
        if _DATETIME_TAG in obj:
            return datetime.fromisoformat(_tag_payload(obj, _DATETIME_TAG))
        if _DATE_TAG in obj:
            return date.fromisoformat(_tag_payload(obj, _DATE_TAG))
    return obj


def _tag_payload(obj: dict[str, Any], tag: str) -> str:
    payload = obj[tag]
    if not isinstance(payload, str):
        msg = f"{tag} must hold an ISO string, got {payload!r}"
        raise ValueError(msg)
    return payload


def encode(value: Any) -> str:
    """Serialize value to canonical JSON text.

    Raises:
        TypeError: If value contains something JSON cannot represent.
        ValueError: If value contains a circular reference or NaN, or is
            nested too deeply.
    """
    try:
        return json.dumps(
            value, cls=_StateEncoder, sort_keys=True, ensure_ascii=False, allow_nan=False
        )
    except RecursionError as e:
        msg = "value is nested too deeply to encode"
        raise ValueError(msg) from e


def decode(text: str | bytes) -> Any:
    """Parse canonical JSON text back into Python values.

    ValueError is the only failure, so callers can treat any stored text
    they cannot decode the same way.

    Raises:
        ValueError: If text is not valid UTF-8 or JSON, is nested too deeply,
            or holds a tagged date without a valid ISO string.
    """
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        return json.loads(text, object_hook=_decode_tagged)
    except RecursionError as e:
        msg = "stored JSON is nested too deeply"
        raise ValueError(msg) from e
