"""Organization model: the tenant boundary for every ledger record."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stoneledger.core.database.base import BaseModel


class Organization(BaseModel):
    """A business (crusher / weighbridge site) owning entries and expenses."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
