"""Read access to organizations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.modules.organizations.models import Organization


class OrganizationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, organization_id: str) -> Organization | None:
        result = await self.db.execute(
            select(Organization).where(Organization.id == organization_id)
        )
        return result.scalar_one_or_none()
