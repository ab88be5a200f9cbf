"""
core/encoding.py
-----------------

Payload encoding (query string, JSON body) and response decoding.

Payloads are pydantic models or plain mappings.  Query strings only
accept flat records: every value must be a scalar, ``None`` values are
skipped and booleans are written as ``true``/``false``.  Anything else
raises :class:`QueryEncodingError`, which the dispatcher treats as
"send the bare address".  Response bodies are validated with pydantic
``TypeAdapter`` instances, cached per target type.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Mapping, Tuple, Type, TypeVar
from urllib.parse import urlencode

import orjson
from pydantic import BaseModel, TypeAdapter

from typed_dispatch.core.errors import QueryEncodingError

T = TypeVar("T")

_SCALARS = (str, int, float)


def to_jsonable(payload: Any) -> Any:
    """Return the JSON-compatible form of a payload."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True)
    return payload


def encode_query(payload: Any) -> str:
    """Flatten ``payload`` into an ``application/x-www-form-urlencoded`` string.

    :raises QueryEncodingError: if the payload is not a flat record
    """
    data = to_jsonable(payload)
    if not isinstance(data, Mapping):
        raise QueryEncodingError(f"cannot encode {type(payload).__name__} as a query string")
    pairs: List[Tuple[str, str]] = []
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, bool):
            pairs.append((str(key), "true" if value else "false"))
        elif isinstance(value, _SCALARS):
            pairs.append((str(key), str(value)))
        else:
            raise QueryEncodingError(f"field {key!r} is not a scalar ({type(value).__name__})")
    return urlencode(pairs)


def build_url(address: str, payload: Any = None) -> str:
    """Append the encoded payload to ``address``.

    Without a payload, or when encoding fails, the address is returned
    unchanged.
    """
    if payload is None:
        return address
    try:
        query = encode_query(payload)
    except QueryEncodingError:
        return address
    if not query:
        return address
    separator = "&" if "?" in address else "?"
    return f"{address}{separator}{query}"


def _encode_default(obj: Any) -> Any:
    # models nested inside mappings or lists
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def encode_body(payload: Any) -> bytes:
    """Serialise ``payload`` as a JSON document.

    :raises orjson.JSONEncodeError: if the payload holds non-serialisable values
    """
    return orjson.dumps(to_jsonable(payload), default=_encode_default)


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def decode(target: Type[T], text: str) -> T:
    """Validate JSON ``text`` against ``target``.

    :raises pydantic.ValidationError: if the text is not valid JSON or
        does not match the shape of ``target``
    """
    try:
        adapter = _adapter(target)
    except TypeError:
        # unhashable annotation, e.g. Annotated with a dict in its metadata
        adapter = TypeAdapter(target)
    return adapter.validate_json(text)


def json_headers(headers: Mapping[str, str] | None) -> Dict[str, str]:
    """Copy ``headers`` adding a JSON content type unless one is present."""
    out: Dict[str, str] = dict(headers or {})
    if not any(k.lower() == "content-type" for k in out):
        out["Content-Type"] = "application/json"
    return out
