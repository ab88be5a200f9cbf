"""Models and transport helpers shared by the dispatcher tests."""

import asyncio
from typing import Callable, List, Optional

import httpx
from pydantic import BaseModel


class AuthenticationRequest(BaseModel):
    email: str
    password: str


class AuthenticationPayload(BaseModel):
    expires: int
    refresh_token: str
    access_token: str


class AuthenticationResponse(BaseModel):
    data: AuthenticationPayload


class ItemQuery(BaseModel):
    limit: int = 10
    active: bool = True
    search: Optional[str] = None


class NestedQuery(BaseModel):
    tags: List[str]


class Item(BaseModel):
    id: int
    name: str


LOGIN_BODY = {
    "data": {"expires": 900000, "refresh_token": "refresh-abc", "access_token": "access-xyz"}
}

NOT_FOUND_BODY = {
    "errors": [{"message": "Route not found", "extensions": {"code": "ROUTE_NOT_FOUND", "reason": None}}]
}


def run(coro):
    return asyncio.run(coro)


class Recorder:
    """MockTransport handler that records requests and replies from a callable."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]) -> None:
        self.reply = reply
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
