from __future__ import annotations

import base64
import time
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from hr_portal.core.dependencies import get_current_user
from hr_portal.core.sharepoint import SharePointClient
from hr_portal.main import app
from hr_portal.models.auth import UserInfo

TEST_TENANT_ID = "test-tenant-00000000-0000-0000-0000-000000000000"
TEST_CLIENT_ID = "test-client-00000000-0000-0000-0000-000000000000"
TEST_KID = "test-kid-1"


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    return base64.urlsafe_b64encode(value.to_bytes(byte_length, byteorder="big")).rstrip(b"=").decode("ascii")


@pytest.fixture(autouse=True)
def _auth_settings():
    from hr_portal.core.config import settings

    original_tenant = settings.AZURE_AD_TENANT_ID
    original_client = settings.AZURE_AD_CLIENT_ID
    settings.AZURE_AD_TENANT_ID = TEST_TENANT_ID
    settings.AZURE_AD_CLIENT_ID = TEST_CLIENT_ID
    yield
    settings.AZURE_AD_TENANT_ID = original_tenant
    settings.AZURE_AD_CLIENT_ID = original_client


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def rsa_test_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("utf-8")

    pub = private_key.public_key().public_numbers()
    jwk_dict = {
        "kty": "RSA",
        "kid": TEST_KID,
        "use": "sig",
        "alg": "RS256",
        "n": _int_to_base64url(pub.n),
        "e": _int_to_base64url(pub.e),
    }
    jwks_response = {"keys": [jwk_dict]}
    return private_pem, jwks_response


def _make_token(
    private_pem: str,
    *,
    oid: str = "test-oid-123",
    name: str = "Test User",
    email: str = "test@jmgroup.com",
    roles: list[str] | None = None,
    expired: bool = False,
    audience: str = TEST_CLIENT_ID,
) -> str:
    now = int(time.time())
    claims = {
        "oid": oid,
        "name": name,
        "preferred_username": email,
        "roles": roles or [],
        "iss": f"https://login.microsoftonline.com/{TEST_TENANT_ID}/v2.0",
        "aud": audience,
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
        "nbf": now - 60,
    }
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": TEST_KID})


@pytest.fixture
def sp_client():
    """SharePointClient stand-in whose async methods are AsyncMocks."""
    mock = MagicMock(spec=SharePointClient)
    mock.initialized = True
    return mock


@pytest.fixture
def mock_user_employee():
    return UserInfo(
        id="oid-emp",
        name="Priya Raman",
        email="priya@jmgroup.com",
        employee_id="12",
        permission_level="Employee",
        department="Operations",
        designation="Associate",
        place="Chennai",
        shift_id="3",
    )


@pytest.fixture
def mock_user_manager():
    return UserInfo(
        id="oid-mgr",
        name="Arjun Mehta",
        email="arjun@jmgroup.com",
        employee_id="5",
        permission_level="Manager",
        department="Operations",
        designation="Operation Manager",
        place="Chennai",
    )


@pytest.fixture
def mock_user_hr():
    return UserInfo(
        id="oid-hr",
        name="Meera Iyer",
        email="meera@jmgroup.com",
        employee_id="7",
        permission_level="HR",
        department="HR",
        designation="Lead HR",
        place="Chennai",
    )


@pytest.fixture
def mock_user_admin():
    return UserInfo(
        id="admin-1",
        name="Admin User",
        email="admin@jmgroup.com",
        roles=["admin"],
        employee_id="1",
        permission_level="Admin",
        department="Information Technology",
        place="Chennai",
    )


@pytest.fixture
def authenticated_client(mock_user_admin):
    app.dependency_overrides[get_current_user] = lambda: mock_user_admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Return a TestClient factory signed in as the given user."""

    def _client(user: UserInfo) -> TestClient:
        app.dependency_overrides[get_current_user] = lambda: user
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()
