"""JWT authentication provider implementation.

Access tokens are issued by Supabase Auth and signed with ES256; their
public keys are published at the project's JWKS endpoint. Tokens signed
with the shared secret (HS256) are accepted too, which is what tests and
local development use.

Supabase JWT payload structure:
    {
        "sub": "user-uuid",
        "email": "rider@example.com",
        "phone": "",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "username": "rider42" },
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

# Roles Supabase puts on tokens that do not belong to a signed-in user
_ANONYMOUS_ROLES = frozenset({"anon", "service_role"})


class JWKSCache:
    """Public signing keys by ``kid``, fetched lazily and refetched on rotation."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._keys: dict[str, Any] | None = None

    async def get(self, kid: str) -> dict[str, Any] | None:
        keys = await self._load()
        if kid not in keys:
            # Unknown kid: the keys may have been rotated since the last fetch
            self._keys = None
            keys = await self._load()
        return keys.get(kid)

    async def _load(self) -> dict[str, Any]:
        if self._keys is not None:
            return self._keys
        if not self._url:
            return {}

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self._url, timeout=10.0)
                response.raise_for_status()
                jwks_data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("jwks_fetch_failed", url=self._url, error=str(e))
            return {}

        self._keys = {
            key_data["kid"]: key_data
            for key_data in jwks_data.get("keys", [])
            if key_data.get("kid")
        }
        logger.info("jwks_fetched", key_count=len(self._keys))
        return self._keys


class JWTAuthProvider:
    """JWT-based authentication provider.

    Handles validation of both Supabase-issued (ES256) and
    locally-created (HS256) JWTs.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        jwks: JWKSCache | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks = jwks or JWKSCache(settings.supabase_jwks_url)

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the rider it belongs to.

        Returns None for malformed, expired or badly signed tokens, and for
        tokens that do not identify a signed-in user (anon or service keys).
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "ES256":
                payload = await self._decode_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if payload is None:
            return None

        role = payload.get("role")
        if role in _ANONYMOUS_ROLES:
            return None

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            return None

        user_metadata = payload.get("user_metadata") or {}
        display_name = (
            user_metadata.get("username")
            or user_metadata.get("display_name")
            or user_metadata.get("full_name")
        )

        return TokenUser(
            id=user_id,
            email=payload.get("email") or None,
            display_name=display_name,
            role=role,
        )

    async def _decode_es256(self, token: str, header: dict) -> Optional[dict]:
        """Verify an ES256-signed JWT against the project's JWKS."""
        kid = header.get("kid")
        if not kid:
            return None

        key_data = await self._jwks.get(kid)
        if not key_data:
            logger.warning("jwks_key_not_found", kid=kid)
            return None

        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """Create an HS256 token for a user (tests and local development)."""
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": user.role or "authenticated",
            "exp": expire,
            "user_metadata": {
                "username": user.display_name,
            },
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
