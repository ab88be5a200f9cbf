"""
typed_dispatch package
-----------------------

Typed HTTP request dispatch: send a request, decode the response into
a success model on 200 or into a caller-defined error model otherwise,
and turn every transport, read and decoding failure into a value of
that error model.

Importing ``typed_dispatch`` exposes the asynchronous entry points; the
blocking ones live in :mod:`typed_dispatch.clients.http_sync`.
"""

from typed_dispatch.clients.http_client import build_async_client, send, send_and_parse
from typed_dispatch.core.config import Settings, get_settings
from typed_dispatch.core.errors import (
    DispatchError,
    PayloadRequiredError,
    ResponseErrorProtocol,
    TypedDispatchError,
)
from typed_dispatch.core.methods import HttpMethod
from typed_dispatch.core.result import Err, Ok, Result
from typed_dispatch.logging_config import configure_logging
from typed_dispatch.schemas.errors import ApiError, ApiErrors, ErrorExtension, MessageError, ResponseError

__version__ = "0.1.0"

__all__ = [
    # Dispatch
    "send_and_parse",
    "send",
    "build_async_client",
    "HttpMethod",
    # Results
    "Ok",
    "Err",
    "Result",
    # Errors
    "ResponseErrorProtocol",
    "ResponseError",
    "ApiErrors",
    "ApiError",
    "ErrorExtension",
    "MessageError",
    "TypedDispatchError",
    "PayloadRequiredError",
    "DispatchError",
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
]
