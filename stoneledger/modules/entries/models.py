"""Truck entry model: one weighed load, either sold or bought as raw stone."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stoneledger.core.database.base import BaseModel


class EntryType(StrEnum):
    """Direction of a truck entry."""

    SALES = "Sales"
    RAW_STONE = "RawStone"


class TruckEntry(BaseModel):
    """Sales or raw-material entry. Amounts are stored as exact numerics."""

    __tablename__ = "truck_entries"
    __table_args__ = (
        Index("ix_truck_entries_org_entry_date", "organization_id", "entry_date"),
    )

    organization_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizations.id"), nullable=False, index=True
    )
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    entry_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    truck_number: Mapped[str] = mapped_column(String(50), nullable=False)
    truck_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    material_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    units: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    rate_per_unit: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    # UTC instant of the weighing
    entry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

