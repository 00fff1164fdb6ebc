"""Collaborator interfaces consumed by the report pipeline, and their SQL implementation."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.modules.entries.repository import TruckEntryRepository
from stoneledger.modules.expenses.repository import ExpenseRepository


class FactRepository(Protocol):
    """Organization- and range-scoped access to ledger facts. Ranges are inclusive."""

    async def find_sales_and_raw_material(
        self, organization_id: str, start_utc: datetime, end_utc: datetime
    ) -> Sequence[Any]: ...

    async def find_expenses(
        self, organization_id: str, start_utc: datetime, end_utc: datetime
    ) -> Sequence[Any]: ...


class OrganizationLookup(Protocol):
    async def find_by_id(self, organization_id: str) -> Any | None: ...


class LedgerFactRepository:
    """FactRepository over the truck_entries and other_expenses tables."""

    def __init__(self, db: AsyncSession):
        self.entries = TruckEntryRepository(db)
        self.expenses = ExpenseRepository(db)

    async def find_sales_and_raw_material(
        self, organization_id: str, start_utc: datetime, end_utc: datetime
    ):
        return await self.entries.find_sales_and_raw_material(organization_id, start_utc, end_utc)

    async def find_expenses(self, organization_id: str, start_utc: datetime, end_utc: datetime):
        return await self.expenses.find_expenses(organization_id, start_utc, end_utc)
