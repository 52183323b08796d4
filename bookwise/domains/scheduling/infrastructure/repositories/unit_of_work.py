"""
SQLAlchemy Unit of Work

Commits or rolls back the session shared by one request's repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.domains.scheduling.application.ports import IUnitOfWork


class SQLAlchemyUnitOfWork(IUnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
