"""
Synchronous request dispatcher built on ``requests``.

Same contract as :mod:`typed_dispatch.clients.http_client` for code
that does not run an event loop (scripts, sync FastAPI routes, worker
processes).  The response is streamed so that failures while reading
the body are told apart from failures while connecting.

Usage example:

    from typed_dispatch.clients.http_sync import send_and_parse
    result = send_and_parse(None, url, headers, "GET", response_type=Items, error_type=ApiErrors)
"""

from __future__ import annotations

import json
import time
from typing import Any, Mapping, Optional, Type, TypeVar

import orjson
import requests
from requests.adapters import HTTPAdapter

from typed_dispatch.core.config import Settings, get_settings
from typed_dispatch.core.dispatch import (
    check_error_type,
    parse_error,
    parse_success,
    prepare_call,
    read_failure,
    transport_failure,
)
from typed_dispatch.core.methods import HttpMethod
from typed_dispatch.core.result import Err, Ok, Result
from typed_dispatch.logging_config import log_http_request, logger

T = TypeVar("T")
E = TypeVar("E")


def build_session(settings: Settings | None = None) -> requests.Session:
    """Create a ``requests.Session`` with pooled adapters and default headers."""
    settings = settings or get_settings()
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=settings.max_keepalive_connections or 1,
                          pool_maxsize=settings.max_connections)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = settings.user_agent
    session.verify = settings.verify_ssl
    return session


def _dispatch(
    session: requests.Session,
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
    error_type: Type[Any],
) -> requests.Response | Err:
    settings = get_settings()
    start_time = time.time()
    try:
        call = prepare_call(payload, address, headers, method)
    except orjson.JSONEncodeError as exc:
        logger.error(json.dumps({"event": "encode_error", "url": address, "detail": str(exc)}))
        return transport_failure(error_type, exc)
    has_body = call.content is not None
    log_http_request(call.verb, call.url, headers=call.headers,
                     params=None if has_body else payload, json_body=payload if has_body else None)
    try:
        resp = session.request(
            method=call.verb,
            url=call.url,
            headers=call.headers,
            data=call.content,
            timeout=(settings.http_connect_timeout, settings.http_timeout),
            allow_redirects=settings.follow_redirects,
            stream=True,
        )
    except requests.RequestException as exc:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(json.dumps({
            "event": "http_error",
            "method": call.verb,
            "url": call.url,
            "detail": str(exc),
        }), exc_info=True)
        log_http_request(call.verb, call.url, status=None, duration_ms=duration_ms)
        return transport_failure(error_type, exc)
    duration_ms = (time.time() - start_time) * 1000
    log_http_request(call.verb, call.url, status=resp.status_code, duration_ms=duration_ms)
    return resp


def _run(session: Optional[requests.Session], func, *args: Any) -> Any:
    if session is not None:
        return func(session, *args)
    with build_session() as owned:
        return func(owned, *args)


def _read_text(resp: requests.Response) -> str:
    # ``Response.text`` falls back to charset detection when the declared codec is unknown
    return resp.text


def _send_and_parse(session, payload, address, headers, method, response_type, error_type):
    outcome = _dispatch(session, payload, address, headers, method, error_type)
    if isinstance(outcome, Err):
        return outcome
    resp = outcome
    try:
        try:
            text = _read_text(resp)
        except requests.RequestException as exc:
            return read_failure(error_type, exc)
        if resp.status_code == requests.codes.ok:
            return parse_success(text, response_type, error_type)
        return parse_error(text, resp.status_code, resp.reason or "", error_type)
    finally:
        resp.close()


def _send(session, payload, address, headers, method, error_type):
    outcome = _dispatch(session, payload, address, headers, method, error_type)
    if isinstance(outcome, Err):
        return outcome
    resp = outcome
    try:
        if 200 <= resp.status_code < 300:
            return Ok(True)
        try:
            text = _read_text(resp)
        except requests.RequestException as exc:
            return read_failure(error_type, exc)
        return parse_error(text, resp.status_code, resp.reason or "", error_type)
    finally:
        resp.close()


def send_and_parse(
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
    *,
    response_type: Type[T],
    error_type: Type[E],
    session: Optional[requests.Session] = None,
) -> Result[T, E]:
    """Blocking counterpart of :func:`typed_dispatch.clients.http_client.send_and_parse`.

    An empty non-200 body goes to ``error_type.from_request_error(reason, status)``
    when the error type defines that hook.

    :param session: session to send through; it is not closed
    :raises PayloadRequiredError: if POST, PUT or DELETE has no payload
    """
    check_error_type(error_type)
    return _run(session, _send_and_parse, payload, address, headers, method, response_type, error_type)


def send(
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
    *,
    error_type: Type[E],
    session: Optional[requests.Session] = None,
) -> Result[bool, E]:
    """Blocking counterpart of :func:`typed_dispatch.clients.http_client.send`."""
    check_error_type(error_type)
    return _run(session, _send, payload, address, headers, method, error_type)
