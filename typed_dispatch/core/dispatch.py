"""
core/dispatch.py
-----------------

Transport-independent half of the dispatcher: building the outgoing
call and turning what came back into a :data:`Result`.

Both the asynchronous client (httpx) and the synchronous one
(requests) go through these helpers so the fallback chain lives in one
place:

* transport failure      -> ``error_type.from_transport_error(exc)`` or ``default()``
* body could not be read -> ``error_type.from_read_error(message)``
* 200 with a valid body  -> ``Ok(decoded)``
* 200 with a bad body    -> ``error_type.from_deserialization_error(message)``
* other status, empty    -> ``error_type.from_request_error(reason, status)`` when defined
* other status, body     -> ``Err(decoded error)`` or the deserialization fallback
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, NamedTuple, Optional, Type

from pydantic import ValidationError

from typed_dispatch.core.encoding import build_url, decode, encode_body, json_headers
from typed_dispatch.core.errors import PayloadRequiredError, ResponseErrorProtocol
from typed_dispatch.core.methods import HttpMethod
from typed_dispatch.core.result import Err, Ok, Result
from typed_dispatch.logging_config import logger


class PreparedCall(NamedTuple):
    verb: str
    url: str
    headers: Dict[str, str]
    content: Optional[bytes]


def coerce_method(method: HttpMethod | str) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    return HttpMethod(str(method).upper())


def check_error_type(error_type: Any) -> None:
    if not isinstance(error_type, ResponseErrorProtocol):
        raise TypeError(
            f"{getattr(error_type, '__name__', error_type)!r} does not implement "
            "default/from_deserialization_error/from_read_error"
        )


def prepare_call(
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
) -> PreparedCall:
    """Resolve verb, URL, headers and body for one request.

    :raises PayloadRequiredError: if a body-carrying method has no payload
    :raises orjson.JSONEncodeError: if the payload cannot be JSON encoded
    """
    method = coerce_method(method)
    if not method.has_body:
        return PreparedCall(method.verb, build_url(address, payload), dict(headers or {}), None)
    if payload is None:
        raise PayloadRequiredError(method.value)
    return PreparedCall(method.verb, address, json_headers(headers), encode_body(payload))


def transport_failure(error_type: Type[Any], exc: BaseException) -> Err:
    hook = getattr(error_type, "from_transport_error", None)
    if hook is not None:
        return Err(hook(exc))
    return Err(error_type.default())


def read_failure(error_type: Type[Any], exc: BaseException) -> Err:
    logger.warning(json.dumps({
        "event": "read_error",
        "detail": str(exc),
    }), exc_info=exc)
    return Err(error_type.from_read_error(str(exc) or type(exc).__name__))


def _deserialization_failure(error_type: Type[Any], target: Any, exc: ValidationError) -> Err:
    logger.warning(json.dumps({
        "event": "decode_error",
        "target": getattr(target, "__name__", str(target)),
        "errors": exc.error_count(),
    }))
    return Err(error_type.from_deserialization_error(str(exc)))


def parse_success(text: str, response_type: Any, error_type: Type[Any]) -> Result:
    try:
        return Ok(decode(response_type, text))
    except ValidationError as exc:
        return _deserialization_failure(error_type, response_type, exc)


def parse_error(text: str, status: int, reason: str, error_type: Type[Any]) -> Err:
    logger.warning(json.dumps({
        "event": "http_error_response",
        "status": status,
        "body": text[:500],
    }))
    # empty error body: build the error from the status line instead of reporting a decode failure
    if not text.strip() and hasattr(error_type, "from_request_error"):
        return Err(error_type.from_request_error(reason, status))
    try:
        return Err(decode(error_type, text))
    except ValidationError as exc:
        return _deserialization_failure(error_type, error_type, exc)
