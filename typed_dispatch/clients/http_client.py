"""
clients/http_client.py
----------------------

Asynchronous request dispatcher built on ``httpx``.

``send_and_parse`` performs one request and decodes the response into
the caller's success type (status 200) or error type (anything else).
``send`` only reports whether the call succeeded (any 2xx).  Neither
raises for network, read or decoding problems: every failure comes back
as ``Err(<error value>)`` built by the caller's error type.

Pass ``client=`` to reuse a pooled ``httpx.AsyncClient``; otherwise a
client is created from :mod:`typed_dispatch.core.config` for the call
and closed afterwards.
"""

from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Type, TypeVar

import httpx
import orjson

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


def build_async_client(
    settings: Settings | None = None,
    *,
    extra_headers: Dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` with the configured defaults.

    Timeouts, HTTP/2, redirects and pool limits come from the settings so
    that every call made without an explicit client behaves the same.
    """
    settings = settings or get_settings()
    headers: Dict[str, str] = {"User-Agent": settings.user_agent}
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        http2=settings.http2,
        timeout=httpx.Timeout(settings.http_timeout, connect=settings.http_connect_timeout),
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
        ),
        follow_redirects=settings.follow_redirects,
        verify=settings.verify_ssl,
        headers=headers,
    )


@asynccontextmanager
async def _client_scope(client: Optional[httpx.AsyncClient]) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with build_async_client() as owned:
        yield owned


async def _dispatch(
    client: httpx.AsyncClient,
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
    error_type: Type[Any],
) -> httpx.Response | Err:
    """Send the request and return the streamed response, or the transport ``Err``.

    The body is not read here; callers decide whether they need it.
    """
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
        request = client.build_request(call.verb, call.url, headers=call.headers, content=call.content)
        response = await client.send(request, stream=True)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.error(json.dumps({
            "event": "http_error",
            "method": call.verb,
            "url": call.url,
            "detail": str(exc),
        }), exc_info=True)
        return transport_failure(error_type, exc)
    duration_ms = (time.time() - start_time) * 1000
    log_http_request(call.verb, call.url, status=response.status_code, duration_ms=duration_ms)
    return response


async def _read_text(response: httpx.Response) -> str:
    await response.aread()
    return response.text


def _reason(response: httpx.Response) -> str:
    # HTTP/2 responses carry no reason phrase
    return response.reason_phrase or httpx.codes.get_reason_phrase(response.status_code)


async def send_and_parse(
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
    *,
    response_type: Type[T],
    error_type: Type[E],
    client: Optional[httpx.AsyncClient] = None,
) -> Result[T, E]:
    """Send a request and decode the response into ``response_type`` or ``error_type``.

    Parameters
    ----------
    payload : pydantic model, mapping or None
        Encoded as a query string for GET, as a JSON body otherwise.
    address : str
        Absolute URL of the endpoint.
    headers : mapping or None
        Request headers.
    method : HttpMethod or str
        GET, POST, PUT (sent as PATCH) or DELETE.
    response_type : type
        Anything pydantic can validate from JSON; used for status 200.
    error_type : type
        Caller error type implementing the error construction hooks.
    client : httpx.AsyncClient, optional
        Client to send through. It is not closed.

    Returns
    -------
    Ok(response_type instance) or Err(error_type instance)

    Raises
    ------
    PayloadRequiredError
        If POST, PUT or DELETE is dispatched without a payload.

    Notes
    -----
    A non-200 response with an empty (or whitespace only) body is not
    decoded: when ``error_type`` defines ``from_request_error`` the error
    is built from the status line, ``from_request_error(reason, status)``.
    Error types without that hook get ``from_deserialization_error`` as
    for any other undecodable body.
    """
    check_error_type(error_type)
    async with _client_scope(client) as http:
        outcome = await _dispatch(http, payload, address, headers, method, error_type)
        if isinstance(outcome, Err):
            return outcome
        response = outcome
        try:
            try:
                text = await _read_text(response)
            except httpx.HTTPError as exc:
                return read_failure(error_type, exc)
            if response.status_code == httpx.codes.OK:
                return parse_success(text, response_type, error_type)
            return parse_error(text, response.status_code, _reason(response), error_type)
        finally:
            await response.aclose()


async def send(
    payload: Any,
    address: str,
    headers: Mapping[str, str] | None,
    method: HttpMethod | str,
    *,
    error_type: Type[E],
    client: Optional[httpx.AsyncClient] = None,
) -> Result[bool, E]:
    """Send a request and report success for any 2xx status.

    The success body is never read or parsed.  Non-2xx responses follow
    the same error decoding as :func:`send_and_parse`, including the
    ``from_request_error`` shortcut for empty error bodies.
    """
    check_error_type(error_type)
    async with _client_scope(client) as http:
        outcome = await _dispatch(http, payload, address, headers, method, error_type)
        if isinstance(outcome, Err):
            return outcome
        response = outcome
        try:
            if response.is_success:
                return Ok(True)
            try:
                text = await _read_text(response)
            except httpx.HTTPError as exc:
                return read_failure(error_type, exc)
            return parse_error(text, response.status_code, _reason(response), error_type)
        finally:
            await response.aclose()
