"""End-to-end dispatch against an in-process FastAPI upstream, plus the route helpers."""

from typing import List, Optional

import httpx
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from fastapi.testclient import TestClient

from tests.helpers import LOGIN_BODY, AuthenticationRequest, AuthenticationResponse, Item, ItemQuery, run
from typed_dispatch.clients.http_client import send, send_and_parse
from typed_dispatch.core.methods import HttpMethod
from typed_dispatch.core.result import Err, Ok
from typed_dispatch.schemas.errors import ApiErrors, MessageError
from typed_dispatch.web import error_status, to_http_exception, unwrap_or_raise

BASE = "http://upstream.test"

ITEMS = [Item(id=1, name="alpha"), Item(id=2, name="beta"), Item(id=3, name="gamma")]


def _errors(status: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ApiErrors.single(message, code=code).model_dump())


def create_upstream() -> FastAPI:
    app = FastAPI()

    @app.post("/auth/login")
    def login(body: AuthenticationRequest):
        if body.password != "hunter2":
            return _errors(401, "Invalid user credentials.", "401")
        return LOGIN_BODY

    @app.get("/items")
    def list_items(limit: int = 10, active: bool = True, search: Optional[str] = None):
        items = [i for i in ITEMS if search is None or search in i.name]
        return [i.model_dump() for i in items[:limit]] if active else []

    @app.patch("/items/{item_id}")
    def rename_item(item_id: int, body: dict):
        for item in ITEMS:
            if item.id == item_id:
                return {"id": item_id, "name": body["name"]}
        return _errors(404, "Item not found", "404")

    @app.delete("/items/{item_id}")
    def delete_item(item_id: int, body: dict):
        if item_id not in {i.id for i in ITEMS}:
            return _errors(404, "Item not found", "404")
        return Response(status_code=204)

    @app.get("/broken")
    def broken():
        return Response(status_code=500)

    return app


@pytest.fixture
def upstream_client():
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=create_upstream()))


def _call(client, coro_factory):
    async def go():
        async with client:
            return await coro_factory(client)
    return run(go())


class TestAgainstFastAPI:
    def test_login_success(self, upstream_client, login_request):
        result = _call(upstream_client, lambda c: send_and_parse(
            login_request, f"{BASE}/auth/login", {}, HttpMethod.POST,
            response_type=AuthenticationResponse, error_type=ApiErrors, client=c))
        assert result.unwrap().data.access_token == "access-xyz"

    def test_login_rejected(self, upstream_client):
        bad = AuthenticationRequest(email="mark@example.com", password="wrong")
        result = _call(upstream_client, lambda c: send_and_parse(
            bad, f"{BASE}/auth/login", {}, HttpMethod.POST,
            response_type=AuthenticationResponse, error_type=ApiErrors, client=c))
        assert isinstance(result, Err)
        assert result.error.message == "Invalid user credentials."
        assert result.error.http_status() == 401

    def test_query_reaches_upstream(self, upstream_client):
        result = _call(upstream_client, lambda c: send_and_parse(
            ItemQuery(limit=2, search="a"), f"{BASE}/items", {}, HttpMethod.GET,
            response_type=List[Item], error_type=ApiErrors, client=c))
        assert [i.name for i in result.unwrap()] == ["alpha", "beta"]

    def test_inactive_flag_encoded_as_false(self, upstream_client):
        result = _call(upstream_client, lambda c: send_and_parse(
            ItemQuery(active=False), f"{BASE}/items", {}, HttpMethod.GET,
            response_type=List[Item], error_type=ApiErrors, client=c))
        assert result == Ok([])

    def test_put_routes_to_patch_handler(self, upstream_client):
        result = _call(upstream_client, lambda c: send_and_parse(
            {"name": "delta"}, f"{BASE}/items/2", {}, HttpMethod.PUT,
            response_type=Item, error_type=ApiErrors, client=c))
        assert result == Ok(Item(id=2, name="delta"))

    def test_delete_send(self, upstream_client):
        result = _call(upstream_client, lambda c: send(
            {"reason": "cleanup"}, f"{BASE}/items/1", {}, HttpMethod.DELETE, error_type=ApiErrors, client=c))
        assert result == Ok(True)

    def test_delete_missing(self, upstream_client):
        result = _call(upstream_client, lambda c: send(
            {"reason": "cleanup"}, f"{BASE}/items/99", {}, HttpMethod.DELETE, error_type=ApiErrors, client=c))
        assert result.error.http_status() == 404

    def test_validation_detail_is_deserialization_error(self, upstream_client):
        # FastAPI answers 422 with {"detail": [...]}, which has no "message"
        result = _call(upstream_client, lambda c: send_and_parse(
            {"email": "only"}, f"{BASE}/auth/login", {}, HttpMethod.POST,
            response_type=AuthenticationResponse, error_type=MessageError, client=c))
        assert isinstance(result, Err)
        assert result.error.status is None
        assert "missing" in result.error.message

    def test_stock_not_found_is_deserialization_error(self, upstream_client):
        result = _call(upstream_client, lambda c: send_and_parse(
            None, f"{BASE}/no-such-route", {}, HttpMethod.GET,
            response_type=Item, error_type=ApiErrors, client=c))
        assert isinstance(result, Err)
        assert result.error.errors[0].extensions.code == "500"
        assert "errors" in result.error.errors[0].message
        assert "missing" in result.error.errors[0].message

    def test_empty_server_error(self, upstream_client):
        result = _call(upstream_client, lambda c: send_and_parse(
            None, f"{BASE}/broken", {}, HttpMethod.GET,
            response_type=Item, error_type=MessageError, client=c))
        assert result.error == MessageError(message="Internal Server Error", status=500)


class TestRouteHelpers:
    def test_unwrap_ok(self):
        assert unwrap_or_raise(Ok(3)) == 3

    def test_unwrap_err_raises_http_exception(self):
        with pytest.raises(HTTPException) as excinfo:
            unwrap_or_raise(Err(ApiErrors.single("gone", code="410")))
        assert excinfo.value.status_code == 410
        assert excinfo.value.detail["errors"][0]["message"] == "gone"

    def test_status_fallbacks(self):
        assert error_status(ApiErrors.single("x", code="NOT_A_STATUS")) == 502
        assert error_status(MessageError(message="x", status=503)) == 503
        assert error_status(MessageError(message="x")) == 502
        assert to_http_exception(MessageError(message="x"), status_code=400).status_code == 400

    def test_route_surfaces_upstream_error(self):
        app = FastAPI()

        @app.get("/proxy")
        def proxy():
            return unwrap_or_raise(Err(ApiErrors.single("upstream says no", code="403")))

        response = TestClient(app).get("/proxy")
        assert response.status_code == 403
        assert response.json()["detail"]["errors"][0]["extensions"]["code"] == "403"
