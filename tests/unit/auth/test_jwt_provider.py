"""Unit tests for JWTAuthProvider and the JWKS key cache."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from jose import jwt as jose_jwt

from infrastructure.auth import jwt_provider as jwt_provider_module
from infrastructure.auth.jwt_provider import JWKSCache, JWTAuthProvider
from infrastructure.auth.provider import TokenUser

JWKS_URL = "https://convoy.supabase.co/auth/v1/.well-known/jwks.json"


def _make_hs256_token(payload: dict, secret: str = "test-secret") -> str:
    return jose_jwt.encode(payload, secret, algorithm="HS256")


def _mock_http_client(response_json: dict | None = None, error: Exception | None = None):
    """AsyncClient stand-in usable as ``async with httpx.AsyncClient() as client``."""
    response = MagicMock()
    response.json.return_value = response_json
    response.raise_for_status = MagicMock()

    client = AsyncMock()
    if error is not None:
        client.get.side_effect = error
    else:
        client.get.return_value = response
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.fixture
def jwks() -> AsyncMock:
    cache = AsyncMock(spec=JWKSCache)
    cache.get.return_value = None
    return cache


@pytest.fixture
def provider(jwks: AsyncMock) -> JWTAuthProvider:
    return JWTAuthProvider(
        secret_key="test-secret", algorithm="HS256", expire_minutes=30, jwks=jwks
    )


# --- HS256 tokens ---


class TestValidateHs256Token:
    async def test_round_trips_created_token(self, provider: JWTAuthProvider):
        user = TokenUser(id=uuid4(), email="mia@example.com", display_name="mia")

        result = await provider.validate_token(provider.create_token(user))

        assert result is not None
        assert result.id == user.id
        assert result.email == "mia@example.com"
        assert result.display_name == "mia"
        assert result.role == "authenticated"

    async def test_email_is_optional(self, provider: JWTAuthProvider):
        user_id = uuid4()
        token = _make_hs256_token({"sub": str(user_id), "role": "authenticated", "exp": 9999999999})

        result = await provider.validate_token(token)

        assert result is not None
        assert result.id == user_id
        assert result.email is None

    async def test_display_name_falls_back_to_full_name(self, provider: JWTAuthProvider):
        token = _make_hs256_token(
            {
                "sub": str(uuid4()),
                "user_metadata": {"full_name": "Mia Member"},
                "exp": 9999999999,
            }
        )

        result = await provider.validate_token(token)

        assert result.display_name == "Mia Member"

    @pytest.mark.parametrize("role", ["anon", "service_role"])
    async def test_rejects_non_user_roles(self, provider: JWTAuthProvider, role: str):
        token = _make_hs256_token({"sub": str(uuid4()), "role": role, "exp": 9999999999})

        assert await provider.validate_token(token) is None

    @pytest.mark.parametrize("sub", [None, "", "not-a-uuid"])
    async def test_rejects_missing_or_malformed_sub(self, provider: JWTAuthProvider, sub):
        payload = {"email": "mia@example.com", "exp": 9999999999}
        if sub is not None:
            payload["sub"] = sub

        assert await provider.validate_token(_make_hs256_token(payload)) is None

    async def test_rejects_wrong_secret(self, provider: JWTAuthProvider):
        token = _make_hs256_token({"sub": str(uuid4()), "exp": 9999999999}, secret="other")

        assert await provider.validate_token(token) is None

    async def test_rejects_expired_token(self, jwks: AsyncMock):
        expired = JWTAuthProvider(
            secret_key="test-secret", algorithm="HS256", expire_minutes=-1, jwks=jwks
        )
        valid = JWTAuthProvider(
            secret_key="test-secret", algorithm="HS256", expire_minutes=30, jwks=jwks
        )
        token = expired.create_token(TokenUser(id=uuid4()))

        assert await valid.validate_token(token) is None

    async def test_rejects_garbage(self, provider: JWTAuthProvider):
        assert await provider.validate_token("not.a.jwt") is None


# --- ES256 tokens ---


class TestValidateEs256Token:
    async def test_header_without_kid(self, provider: JWTAuthProvider, jwks: AsyncMock):
        assert await provider._decode_es256("es256.token.value", {"alg": "ES256"}) is None
        jwks.get.assert_not_awaited()

    async def test_unknown_kid(self, provider: JWTAuthProvider, jwks: AsyncMock):
        result = await provider._decode_es256(
            "es256.token.value", {"alg": "ES256", "kid": "missing"}
        )

        assert result is None
        jwks.get.assert_awaited_once_with("missing")

    async def test_decodes_with_published_key(self, provider: JWTAuthProvider, jwks: AsyncMock):
        key_data = {"kid": "k1", "kty": "EC", "crv": "P-256"}
        payload = {"sub": str(uuid4()), "role": "authenticated"}
        jwks.get.return_value = key_data

        with (
            patch.object(jwt_provider_module, "ECKey") as mock_eckey_cls,
            patch.object(jwt_provider_module.jwt, "decode", return_value=payload) as mock_decode,
        ):
            result = await provider._decode_es256("es256.token.value", {"alg": "ES256", "kid": "k1"})

        assert result == payload
        mock_eckey_cls.assert_called_once_with(key_data, algorithm="ES256")
        mock_decode.assert_called_once_with(
            "es256.token.value",
            mock_eckey_cls.return_value,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    async def test_validate_token_takes_es256_path(self, provider: JWTAuthProvider):
        user_id = uuid4()
        payload = {
            "sub": str(user_id),
            "role": "authenticated",
            "user_metadata": {"username": "rider42"},
        }

        with (
            patch.object(
                jwt_provider_module.jwt,
                "get_unverified_header",
                return_value={"alg": "ES256", "kid": "k1"},
            ),
            patch.object(provider, "_decode_es256", new_callable=AsyncMock) as mock_es256,
        ):
            mock_es256.return_value = payload
            result = await provider.validate_token("es256.token.value")

        mock_es256.assert_awaited_once_with("es256.token.value", {"alg": "ES256", "kid": "k1"})
        assert result.id == user_id
        assert result.display_name == "rider42"


# --- JWKSCache ---


class TestJWKSCache:
    async def test_empty_url_yields_no_keys(self):
        assert await JWKSCache("").get("k1") is None

    async def test_fetches_once_and_caches(self):
        client = _mock_http_client(
            {
                "keys": [
                    {"kid": "k1", "kty": "EC"},
                    {"kty": "EC"},
                    {"kid": "k2", "kty": "EC"},
                ]
            }
        )
        cache = JWKSCache(JWKS_URL)

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            first = await cache.get("k1")
            second = await cache.get("k2")

        assert first == {"kid": "k1", "kty": "EC"}
        assert second["kid"] == "k2"
        client.get.assert_awaited_once_with(JWKS_URL, timeout=10.0)

    async def test_refetches_on_unknown_kid(self):
        client = _mock_http_client({"keys": [{"kid": "old", "kty": "EC"}]})
        cache = JWKSCache(JWKS_URL)

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            await cache.get("old")
            rotated = await cache.get("new")

        assert rotated is None
        assert client.get.await_count == 2

    async def test_http_failure_yields_no_keys(self):
        client = _mock_http_client(error=httpx.ConnectError("connection refused"))
        cache = JWKSCache(JWKS_URL)

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            assert await cache.get("k1") is None
