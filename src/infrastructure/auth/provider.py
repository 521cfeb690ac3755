"""Who is calling: the token user and the verifier contract."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The caller as described by a verified access token.

    Riders can sign up by phone, so ``email`` may be missing. ``id`` is the
    same UUID as the rider's row in the users table.
    """

    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[str] = None


class IAuthProvider(Protocol):
    """Verifies access tokens and, for tests and local runs, issues them."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the token's user, or None when the token is not acceptable."""
        ...

    def create_token(self, user: TokenUser) -> str:
        """Issue a short-lived HS256 token for a user."""
        ...
