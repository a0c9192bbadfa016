"""Tenant repository for business scope lookups."""

from __future__ import annotations

from typing import Optional

from .base import BaseRepository
from ..models import Tenant


class TenantRepository(BaseRepository[Tenant]):
    """Repository for tenant reads."""

    async def get(self, tenant_id: str) -> Optional[Tenant]:
        """Get a tenant by ID.

        Args:
            tenant_id: The business ID.

        Returns:
            Tenant or None if not found.
        """
        row = await self._query_one(
            "SELECT id, slug, name FROM tenants WHERE id = ?",
            (tenant_id,),
        )
        if not row:
            return None
        return Tenant(id=row["id"], slug=row["slug"], name=row["name"])
