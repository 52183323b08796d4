"""
Self-Serve Token Service

Issues and consumes single-use tokens backing reschedule/cancel links and
waitlist claims. Token writes are committed right away: a consumed token must
stay consumed even if the action it authorized fails afterwards.
"""

import logging
import secrets
from datetime import timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.core.domain import TokenInvalidException, generate_uuid_str
from bookwise.core.shared import Clock, utc_now
from bookwise.domains.scheduling.application.ports import ITokenIssuer
from bookwise.domains.scheduling.domain.entities import SelfServeToken
from bookwise.domains.scheduling.domain.value_objects import TokenType
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import SelfServeTokenModel

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class SelfServeTokenService(ITokenIssuer):
    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self.session = session
        self.clock = clock

    async def create_token(
        self,
        type: TokenType,
        contact: str,
        tenant_id: str,
        staff_id: str | None = None,
        expiry_hours: float = 48,
        related_id: str | None = None,
    ) -> str:
        token = secrets.token_hex(TOKEN_BYTES)
        self.session.add(
            SelfServeTokenModel(
                id=generate_uuid_str(),
                token=token,
                type=type,
                contact=contact,
                tenant_id=tenant_id,
                staff_id=staff_id,
                related_id=related_id,
                expires_at=self.clock() + timedelta(hours=expiry_hours),
            )
        )
        await self.session.commit()
        logger.debug(f"Issued {type.value} token for {related_id or contact}")
        return token

    async def validate_token(self, token: str, type: TokenType) -> SelfServeToken:
        result = await self.session.execute(
            select(SelfServeTokenModel)
            .where(SelfServeTokenModel.token == token)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        if model is None or model.type != type:
            raise TokenInvalidException(token_type=type.value)

        record = self._to_entity(model)
        if record.is_used:
            raise TokenInvalidException("Token has already been used", token_type=type.value)
        if record.is_expired(self.clock()):
            raise TokenInvalidException("Token has expired", token_type=type.value)
        return record

    async def mark_used(self, token_id: str) -> None:
        """
        Consume a token with a conditional update.

        Only the first of several concurrent callers updates a row; the others
        see zero rows affected and are rejected.
        """
        result = await self.session.execute(
            update(SelfServeTokenModel)
            .where(SelfServeTokenModel.id == token_id, SelfServeTokenModel.used_at.is_(None))
            .values(used_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            await self.session.rollback()
            raise TokenInvalidException("Token has already been used")
        await self.session.commit()

    async def revoke_tokens(self, contact: str, type: TokenType) -> int:
        result = await self.session.execute(
            delete(SelfServeTokenModel)
            .where(SelfServeTokenModel.contact == contact, SelfServeTokenModel.type == type)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def revoke_by_related_id(self, related_id: str, type: TokenType) -> int:
        result = await self.session.execute(
            delete(SelfServeTokenModel)
            .where(SelfServeTokenModel.related_id == related_id, SelfServeTokenModel.type == type)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount or 0

    def _to_entity(self, model: SelfServeTokenModel) -> SelfServeToken:
        return SelfServeToken(
            id=model.id,  # type: ignore[arg-type]
            token=model.token,  # type: ignore[arg-type]
            type=model.type,  # type: ignore[arg-type]
            contact=model.contact,  # type: ignore[arg-type]
            tenant_id=model.tenant_id,  # type: ignore[arg-type]
            staff_id=model.staff_id,  # type: ignore[arg-type]
            related_id=model.related_id,  # type: ignore[arg-type]
            expires_at=model.expires_at,  # type: ignore[arg-type]
            used_at=model.used_at,  # type: ignore[arg-type]
        )
