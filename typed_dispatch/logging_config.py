"""
logging_config.py
------------------

Shared logging configuration and helpers for structured logging
throughout the dispatcher.  It uses Python's built‑in ``logging``
module and serialises every message as JSON so that log output can be
parsed downstream by ELK, Grafana or Datadog.

Import ``logger`` and call its methods instead of ``logging.info``
directly.  ``log_http_request`` records outbound requests without
leaking credentials carried in headers or payloads.

The package logger only carries a ``NullHandler``; applications that
want the output on stdout call :func:`configure_logging` once at start
up.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Mapping

from typed_dispatch.core.config import get_settings

# Headers that must never reach the logs.
SENSITIVE_HEADERS = {"authorization", "proxy-authorization", "cookie", "set-cookie", "x-api-key"}

logger = logging.getLogger("typed_dispatch")
logger.addHandler(logging.NullHandler())


def configure_logging(level: str | None = None) -> None:
    """Send log records to stdout at ``level`` (settings' ``log_level`` by default)."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.setLevel(level)


def _sanitize(obj: Any) -> Any:
    """Recursively sanitise objects for logging.

    Dictionaries have keys containing 'token', 'password' or 'secret'
    removed.  Lists and tuples are processed element‑wise, byte strings
    are replaced by a size marker and pydantic models are dumped first.

    Parameters
    ----------
    obj : Any
        Arbitrary Python object to sanitise.

    Returns
    -------
    Any
        A sanitised representation of the input suitable for JSON serialisation.
    """
    if isinstance(obj, (bytes, bytearray)):
        return f"<binary {len(obj)} bytes>"
    if isinstance(obj, Mapping):
        clean: Dict[str, Any] = {}
        for k, v in obj.items():
            if any(keyword in str(k).lower() for keyword in ("token", "password", "secret")):
                continue
            clean[str(k)] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "model_dump"):
        try:
            return _sanitize(obj.model_dump(mode="json"))
        except Exception:
            return repr(obj)
    try:
        return json.loads(json.dumps(obj))
    except (TypeError, ValueError):
        return str(obj)


def safe_headers(headers: Mapping[str, str] | None) -> Dict[str, str]:
    """Return a copy of ``headers`` without credential-bearing entries."""
    if not headers:
        return {}
    return {k: v for k, v in headers.items() if k.lower() not in SENSITIVE_HEADERS}


def log_http_request(method: str, url: str, *, headers: Mapping[str, str] | None = None,
                     params: Any = None, json_body: Any = None,
                     status: int | None = None, duration_ms: float | None = None) -> None:
    """Log an outbound HTTP request at DEBUG level.

    Call once before sending (without ``status``) and once after the
    response arrives.  Only high‑level information (method, URL, status
    and duration) plus a sanitised payload is recorded.

    Parameters
    ----------
    method : str
        The wire verb (GET, POST, PATCH, DELETE).
    url : str
        The final URL, query string included.
    headers : mapping, optional
        Request headers.  Sensitive keys are removed.
    params : Any, optional
        Payload that was encoded into the query string.
    json_body : Any, optional
        Payload sent as the JSON body.
    status : int, optional
        Response status code (log end only).
    duration_ms : float, optional
        Time taken in milliseconds (log end only).
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    data: Dict[str, Any] = {
        "event": "http_request",
        "method": method,
        "url": url,
    }
    if headers is not None:
        data["headers"] = safe_headers(headers)
    if params is not None:
        data["params"] = _sanitize(params)
    if json_body is not None:
        data["json"] = _sanitize(json_body)
    if status is not None:
        data["status"] = status
    if duration_ms is not None:
        data["duration_ms"] = round(duration_ms, 2)
    logger.debug(json.dumps(data))
