"""
Tenant Settings Repository

Reads per-tenant scheduling configuration from the tenants table and merges
the stored overrides with defaults.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.domains.scheduling.application.ports import ITenantSettingsProvider
from bookwise.domains.scheduling.domain.value_objects import (
    NotificationSettings,
    PolicySettings,
    WaitlistSettings,
)
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import TenantModel

logger = logging.getLogger(__name__)


class SQLAlchemyTenantSettingsRepository(ITenantSettingsProvider):
    def __init__(self, session: AsyncSession, default_timezone: str = "UTC"):
        self.session = session
        self.default_timezone = default_timezone

    async def _get_tenant(self, tenant_id: str) -> TenantModel | None:
        result = await self.session.execute(select(TenantModel).where(TenantModel.id == tenant_id))
        return result.scalar_one_or_none()

    async def get_policy_settings(self, tenant_id: str) -> PolicySettings | None:
        tenant = await self._get_tenant(tenant_id)
        if tenant is None:
            return None
        return PolicySettings.from_overrides(tenant.policy_settings)  # type: ignore[arg-type]

    async def get_notification_settings(self, tenant_id: str) -> NotificationSettings | None:
        tenant = await self._get_tenant(tenant_id)
        if tenant is None:
            return None
        return NotificationSettings.from_overrides(tenant.notification_settings)  # type: ignore[arg-type]

    async def get_waitlist_settings(self, tenant_id: str) -> WaitlistSettings | None:
        tenant = await self._get_tenant(tenant_id)
        if tenant is None:
            return None
        try:
            return WaitlistSettings.from_overrides(tenant.waitlist_settings)  # type: ignore[arg-type]
        except ValueError as e:
            logger.warning(f"Invalid waitlist settings for tenant {tenant_id}, using defaults: {e}")
            return WaitlistSettings()

    async def get_timezone(self, tenant_id: str) -> str:
        tenant = await self._get_tenant(tenant_id)
        if tenant is None or not tenant.timezone:
            return self.default_timezone
        return tenant.timezone  # type: ignore[return-value]
