"""
Transaction Port

Repositories of one request share a database session; services decide when
the unit of work is committed or rolled back (and thereby when row locks
taken with ``*_for_update`` / ``lock_staff`` are released).
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IUnitOfWork(Protocol):
    async def commit(self) -> None:
        """Make pending changes durable and release row locks."""
        ...

    async def rollback(self) -> None:
        """Discard pending changes and release row locks."""
        ...
