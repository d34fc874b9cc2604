import asyncio
import base64
import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from ziroplans.config import settings
from ziroplans.errors import AuthenticationError
from ziroplans.services import auth_service
from ziroplans.services.auth_service import authenticate, clerk_domain, resolve_user_id

KID = "ins_test_key"


def _keypair():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = KID
    return private_pem, public_jwk


@pytest.fixture(scope="module")
def keys():
    return _keypair()


@pytest.fixture(autouse=True)
def clerk_settings(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_JWKS_URL", "https://clerk.example.com/.well-known/jwks.json")
    monkeypatch.setattr(auth_service, "_jwks_cache", {})


def _token(private_pem, sub="user_2abc", kid=KID, exp_offset=300):
    claims = {"sub": sub, "iss": "https://clerk.example.com", "iat": int(time.time()), "exp": int(time.time()) + exp_offset}
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


def _authenticate(header, public_jwk, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(str(request.url))
        return httpx.Response(200, json={"keys": [public_jwk]})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await authenticate(header, client)

    return asyncio.run(run())


def _resolve_against(header, response):
    async def run():
        transport = httpx.MockTransport(lambda request: response)
        async with httpx.AsyncClient(transport=transport) as client:
            return await resolve_user_id(header, client)

    return asyncio.run(run())


class TestClerkDomain:
    def test_decodes_publishable_key(self):
        encoded = base64.b64encode(b"clerk.ziroplans.dev$").decode().rstrip("=")
        assert clerk_domain(f"pk_test_{encoded}") == "clerk.ziroplans.dev"

    def test_bad_key(self):
        assert clerk_domain("not-a-key") == ""
        assert clerk_domain("") == ""


class TestAuthenticate:
    def test_valid_token_yields_subject(self, keys):
        private_pem, public_jwk = keys
        assert _authenticate(f"Bearer {_token(private_pem)}", public_jwk) == "user_2abc"

    def test_jwks_fetched_once_per_process(self, keys):
        private_pem, public_jwk = keys
        calls = []
        _authenticate(f"Bearer {_token(private_pem)}", public_jwk, calls)
        _authenticate(f"Bearer {_token(private_pem, sub='user_other')}", public_jwk, calls)
        assert calls == ["https://clerk.example.com/.well-known/jwks.json"]

    def test_missing_or_non_bearer_header(self, keys):
        _, public_jwk = keys
        assert _authenticate(None, public_jwk) is None
        assert _authenticate("Basic dXNlcjpwYXNz", public_jwk) is None

    def test_garbage_token(self, keys):
        _, public_jwk = keys
        assert _authenticate("Bearer not.a.jwt", public_jwk) is None

    def test_expired_token(self, keys):
        private_pem, public_jwk = keys
        assert _authenticate(f"Bearer {_token(private_pem, exp_offset=-60)}", public_jwk) is None

    def test_unknown_key_id(self, keys):
        private_pem, public_jwk = keys
        assert _authenticate(f"Bearer {_token(private_pem, kid='rotated')}", public_jwk) is None

    def test_token_signed_by_another_key(self, keys):
        _, public_jwk = keys
        other_private, _ = _keypair()
        assert _authenticate(f"Bearer {_token(other_private)}", public_jwk) is None


class TestResolveUserId:
    def test_anonymous_fallback_when_allowed(self, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_ANONYMOUS", True)
        monkeypatch.setattr(settings, "ANONYMOUS_USER_ID", "dev-user")
        assert asyncio.run(resolve_user_id(None)) == "dev-user"

    def test_rejects_when_anonymous_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_ANONYMOUS", False)
        with pytest.raises(AuthenticationError):
            asyncio.run(resolve_user_id(None))

    @pytest.mark.parametrize("status, body", [
        (200, {"text": "<html>oops</html>"}),
        (200, {"json": [{"kid": KID}]}),
        (200, {"json": {"keys": "none"}}),
        (503, {"text": "upstream down"}),
    ])
    def test_broken_jwks_endpoint_falls_back_to_anonymous(self, keys, monkeypatch, status, body):
        monkeypatch.setattr(settings, "ALLOW_ANONYMOUS", True)
        monkeypatch.setattr(settings, "ANONYMOUS_USER_ID", "dev-user")
        private_pem, _ = keys
        assert _resolve_against(f"Bearer {_token(private_pem)}", httpx.Response(status, **body)) == "dev-user"

    def test_broken_jwks_endpoint_is_401_when_anonymous_disabled(self, keys, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_ANONYMOUS", False)
        private_pem, _ = keys
        with pytest.raises(AuthenticationError):
            _resolve_against(f"Bearer {_token(private_pem)}", httpx.Response(200, text="<html>oops</html>"))
