"""Other (miscellaneous) expense model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stoneledger.core.database.base import BaseModel


class OtherExpense(BaseModel):
    """Expense outside truck entries (diesel, wages, maintenance...)."""

    __tablename__ = "other_expenses"
    __table_args__ = (
        Index("ix_other_expenses_org_date", "organization_id", "date"),
    )

    organization_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizations.id"), nullable=False, index=True
    )
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    # Category label
    expenses_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Free-text description used when the category is "Others"
    others: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
