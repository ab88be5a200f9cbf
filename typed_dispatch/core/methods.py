"""
core/methods.py
----------------

The closed set of methods the dispatcher understands.  ``PUT`` is
sent on the wire as ``PATCH``: partial updates are what the upstream
APIs this library talks to expect.
"""

from __future__ import annotations

from enum import Enum


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def verb(self) -> str:
        """The HTTP verb actually written on the request line."""
        if self is HttpMethod.PUT:
            return "PATCH"
        return self.value

    @property
    def has_body(self) -> bool:
        """Whether the payload travels as a JSON body rather than a query string."""
        return self is not HttpMethod.GET
