from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from bookwise.core.domain import TokenInvalidException
from bookwise.domains.scheduling.domain.value_objects import TokenType
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import SelfServeTokenModel
from bookwise.domains.scheduling.infrastructure.services import SelfServeTokenService

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)


@pytest.fixture
def session():
    session = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def service(session):
    return SelfServeTokenService(session, clock=lambda: NOW)


def stored_token(**overrides) -> SelfServeTokenModel:
    values = {
        "id": "tok-1",
        "token": "abc",
        "type": TokenType.CANCEL_LINK,
        "contact": "ana@example.com",
        "tenant_id": "t1",
        "staff_id": None,
        "related_id": "b1",
        "expires_at": NOW + timedelta(hours=1),
        "used_at": None,
    }
    values.update(overrides)
    return SelfServeTokenModel(**values)


def returning(session, model):
    result = MagicMock()
    result.scalar_one_or_none.return_value = model
    session.execute.return_value = result


class TestCreateToken:
    @pytest.mark.asyncio
    async def test_token_is_stored_and_committed(self, service, session):
        token = await service.create_token(
            TokenType.RESCHEDULE_LINK, "ana@example.com", "t1", staff_id="s1", expiry_hours=48, related_id="b1"
        )

        assert len(token) == 64
        model = session.add.call_args.args[0]
        assert model.token == token
        assert model.staff_id == "s1"
        assert model.expires_at == NOW + timedelta(hours=48)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, service):
        first = await service.create_token(TokenType.CANCEL_LINK, "a", "t1")
        second = await service.create_token(TokenType.CANCEL_LINK, "a", "t1")

        assert first != second


class TestValidateToken:
    @pytest.mark.asyncio
    async def test_valid_token(self, service, session):
        returning(session, stored_token())

        record = await service.validate_token("abc", TokenType.CANCEL_LINK)

        assert record.id == "tok-1"
        assert record.related_id == "b1"

    @pytest.mark.asyncio
    async def test_unknown_token(self, service, session):
        returning(session, None)

        with pytest.raises(TokenInvalidException, match="Invalid token"):
            await service.validate_token("nope", TokenType.CANCEL_LINK)

    @pytest.mark.asyncio
    async def test_wrong_type(self, service, session):
        returning(session, stored_token())

        with pytest.raises(TokenInvalidException, match="Invalid token"):
            await service.validate_token("abc", TokenType.RESCHEDULE_LINK)

    @pytest.mark.asyncio
    async def test_used_token(self, service, session):
        returning(session, stored_token(used_at=NOW - timedelta(minutes=5)))

        with pytest.raises(TokenInvalidException, match="already been used"):
            await service.validate_token("abc", TokenType.CANCEL_LINK)

    @pytest.mark.asyncio
    async def test_expired_token(self, service, session):
        returning(session, stored_token(expires_at=NOW - timedelta(seconds=1)))

        with pytest.raises(TokenInvalidException, match="expired"):
            await service.validate_token("abc", TokenType.CANCEL_LINK)


class TestMarkUsed:
    @pytest.mark.asyncio
    async def test_first_use_commits(self, service, session):
        session.execute.return_value = MagicMock(rowcount=1)

        await service.mark_used("tok-1")

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_use_is_rejected(self, service, session):
        session.execute.return_value = MagicMock(rowcount=0)

        with pytest.raises(TokenInvalidException, match="already been used"):
            await service.mark_used("tok-1")

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()


class TestRevoke:
    @pytest.mark.asyncio
    async def test_revoke_by_contact(self, service, session):
        session.execute.return_value = MagicMock(rowcount=2)

        assert await service.revoke_tokens("ana@example.com", TokenType.CANCEL_LINK) == 2
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_revoke_by_related_id(self, service, session):
        session.execute.return_value = MagicMock(rowcount=None)

        assert await service.revoke_by_related_id("w1", TokenType.WAITLIST_CLAIM) == 0
