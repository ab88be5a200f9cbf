import pytest

from tests.helpers import AuthenticationRequest
from typed_dispatch.core.config import Settings
from typed_dispatch.schemas.errors import ApiErrors


@pytest.fixture
def login_request():
    return AuthenticationRequest(email="mark@example.com", password="hunter2")


@pytest.fixture
def error_type():
    return ApiErrors


@pytest.fixture
def settings():
    return Settings(http2=False, http_timeout=2.0, http_connect_timeout=1.0)
