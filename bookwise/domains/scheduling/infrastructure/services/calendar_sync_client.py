"""
HTTP Calendar Sync Client

ICalendarSync adapter talking to an external calendar sync service. Without
a configured base URL it does nothing and reports no external events.
"""

import logging
from datetime import date, datetime
from typing import Any

import httpx

from bookwise.core.domain import IntegrationException
from bookwise.core.shared import ensure_utc
from bookwise.domains.scheduling.application.ports import ICalendarSync
from bookwise.domains.scheduling.domain.entities import Booking
from bookwise.domains.scheduling.domain.value_objects import CalendarAction, TimeRange

logger = logging.getLogger(__name__)

SERVICE_NAME = "calendar_sync"


class HttpCalendarSyncClient(ICalendarSync):
    """
    Example:
        ```python
        client = HttpCalendarSyncClient(base_url="https://calendar.internal", timeout=10)
        busy = await client.pull_external_events("staff-1", date(2026, 3, 2))
        ```
    """

    def __init__(self, base_url: str | None = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.base_url is not None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method=method, url=url, params=params, json=data)
                logger.debug(f"Request to {url} - Status: {response.status_code}")
                response.raise_for_status()
                return response.json() if response.content else None
        except httpx.TimeoutException as e:
            raise IntegrationException(SERVICE_NAME, f"Timeout in request to {url}", e) from e
        except httpx.HTTPStatusError as e:
            raise IntegrationException(
                SERVICE_NAME, f"Calendar sync returned {e.response.status_code} for {url}", e
            ) from e
        except httpx.RequestError as e:
            raise IntegrationException(SERVICE_NAME, f"Request error for {url}: {e}", e) from e

    async def sync_booking_to_calendar(self, booking: Booking, action: CalendarAction) -> None:
        if not self.enabled or not booking.staff_id:
            return
        await self._request(
            "POST",
            f"staff/{booking.staff_id}/events",
            data={
                "action": action.value,
                "booking_id": booking.id,
                "tenant_id": booking.tenant_id,
                "start_time": booking.start_time.isoformat() if booking.start_time else None,
                "end_time": booking.end_time.isoformat() if booking.end_time else None,
                "title": booking.service.name if booking.service else "Booking",
            },
        )
        logger.debug(f"Synced booking {booking.id} to calendar ({action.value})")

    async def pull_external_events(self, staff_id: str, day: date) -> list[TimeRange]:
        if not self.enabled:
            return []
        payload = await self._request("GET", f"staff/{staff_id}/events", params={"date": day.isoformat()})

        events: list[TimeRange] = []
        for item in payload or []:
            try:
                start = ensure_utc(datetime.fromisoformat(item["start"]))
                end = ensure_utc(datetime.fromisoformat(item["end"]))
                events.append(TimeRange(start, end))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed calendar event for staff {staff_id}: {e}")
        return events
