"""
Waitlist Repository Port
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import WaitlistStatus


@runtime_checkable
class IWaitlistRepository(Protocol):
    """
    Waitlist repository interface.

    ``find_by_id_for_update`` is the serialization point for claims: two
    claimants of one entry queue on its row lock.
    """

    async def find_by_id(self, tenant_id: str, entry_id: str) -> WaitlistEntry | None:
        ...

    async def find_by_id_for_update(self, entry_id: str) -> WaitlistEntry | None:
        """
        Load the entry holding an exclusive row lock until the unit of work ends.

        Args:
            entry_id: Waitlist entry identifier (tenant comes from the token)

        Returns:
            The locked entry, or None
        """
        ...

    async def find_active(self, tenant_id: str, customer_id: str, service_id: str) -> WaitlistEntry | None:
        """The customer's ACTIVE entry for the service, if any."""
        ...

    async def find_all(
        self,
        tenant_id: str,
        status: WaitlistStatus | None = None,
        service_id: str | None = None,
        staff_id: str | None = None,
    ) -> list[WaitlistEntry]:
        """Entries newest first."""
        ...

    async def find_offer_candidates(
        self,
        tenant_id: str,
        service_id: str,
        staff_id: str | None,
        limit: int,
    ) -> list[WaitlistEntry]:
        """
        ACTIVE entries for the service whose staff preference is ``staff_id`` or
        none, oldest joined first.
        """
        ...

    async def find_created_since(self, tenant_id: str, since: datetime) -> list[WaitlistEntry]:
        ...

    async def add(self, entry: WaitlistEntry) -> WaitlistEntry:
        ...

    async def update(self, entry: WaitlistEntry) -> WaitlistEntry:
        ...

    async def expire_offers(self, now: datetime) -> int:
        """Batched flip of OFFERED entries whose offer expired before ``now``. Returns rows affected."""
        ...
