"""
Token Issuer Port

Single-use, time-limited tokens for self-serve links and waitlist claims.
"""

from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import SelfServeToken
from bookwise.domains.scheduling.domain.value_objects import TokenType


@runtime_checkable
class ITokenIssuer(Protocol):
    async def create_token(
        self,
        type: TokenType,
        contact: str,
        tenant_id: str,
        staff_id: str | None = None,
        expiry_hours: float = 48,
        related_id: str | None = None,
    ) -> str:
        """
        Issue a token and return its opaque value.

        Args:
            type: What the token authorizes
            contact: Customer contact the token is scoped to
            tenant_id: Owning tenant
            staff_id: Staff member who issued it, if any
            expiry_hours: Lifetime in hours
            related_id: Booking or waitlist entry the token acts on
        """
        ...

    async def validate_token(self, token: str, type: TokenType) -> SelfServeToken:
        """
        Raises:
            TokenInvalidException: Unknown token, wrong type, already used or expired
        """
        ...

    async def mark_used(self, token_id: str) -> None:
        """
        Consume the token durably.

        Raises:
            TokenInvalidException: If another request consumed it first
        """
        ...

    async def revoke_tokens(self, contact: str, type: TokenType) -> int:
        ...

    async def revoke_by_related_id(self, related_id: str, type: TokenType) -> int:
        ...
