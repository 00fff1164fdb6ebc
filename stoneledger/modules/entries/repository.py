"""Read access to truck entries for reporting."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.modules.entries.models import EntryType, TruckEntry


class TruckEntryRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_sales_and_raw_material(
        self,
        organization_id: str,
        start_utc: datetime,
        end_utc: datetime,
    ) -> list[TruckEntry]:
        """Sales and raw-stone entries of one organization with entry_date in [start_utc, end_utc]."""
        result = await self.db.execute(
            select(TruckEntry)
            .where(
                TruckEntry.organization_id == organization_id,
                TruckEntry.entry_type.in_([EntryType.SALES.value, EntryType.RAW_STONE.value]),
                TruckEntry.entry_date >= start_utc,
                TruckEntry.entry_date <= end_utc,
            )
            .order_by(TruckEntry.entry_date, TruckEntry.id)
        )
        return list(result.scalars().all())
