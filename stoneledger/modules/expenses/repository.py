"""Read access to other expenses for reporting."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.modules.expenses.models import OtherExpense


class ExpenseRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_expenses(
        self,
        organization_id: str,
        start_utc: datetime,
        end_utc: datetime,
    ) -> list[OtherExpense]:
        """Active expenses of one organization dated in [start_utc, end_utc]."""
        result = await self.db.execute(
            select(OtherExpense)
            .where(
                OtherExpense.organization_id == organization_id,
                OtherExpense.is_active.is_(True),
                OtherExpense.date >= start_utc,
                OtherExpense.date <= end_utc,
            )
            .order_by(OtherExpense.date, OtherExpense.id)
        )
        return list(result.scalars().all())
