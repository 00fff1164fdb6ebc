#!/usr/bin/env python3
"""
Seed the database with realistic demo data for two crusher sites.

Amounts, materials and vehicles are fixed (not random) so that reports for
"this month", "last month" and the yearly trend look meaningful.

Usage:
    python scripts/seed_demo_data.py --dry-run   # nothing written
    python scripts/seed_demo_data.py --confirm   # commit to the database

Requires migrations to be applied (alembic upgrade head).
"""

import asyncio
import sys
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.core.config import settings
from stoneledger.core.database.session import async_session
from stoneledger.modules.entries.models import EntryType, TruckEntry
from stoneledger.modules.expenses.models import OtherExpense
from stoneledger.modules.organizations.models import Organization
from stoneledger.shared.utils.money import round_money
from stoneledger.shared.utils.timezones import offset_minutes

ORGANIZATIONS = [
    ("Sri Ganesh Blue Metals", "Hosur, Tamil Nadu"),
    ("Kaveri Stone Crushers", "Mandya, Karnataka"),
]

# material -> rate per load (sales)
SALES_RATES = {
    "20mm": Decimal("9500.00"),
    "40mm": Decimal("8200.00"),
    "M-Sand": Decimal("11800.00"),
    "P-Sand": Decimal("13500.00"),
    "GSB": Decimal("6200.00"),
}

RAW_STONE_RATE = Decimal("4200.00")

VEHICLES = [
    ("TN 70 AB 4521", "Murugan Transport"),
    ("KA 11 C 9087", "Lakshmi Builders"),
    ("TN 29 Z 1180", "Sai Constructions"),
    ("KA 05 MN 3345", "Ramesh Quarry Works"),
]

# (category, description, amount)
MONTHLY_EXPENSES = [
    ("Diesel", None, Decimal("185000.00")),
    ("Salary", None, Decimal("240000.00")),
    ("EB Bill", None, Decimal("96500.00")),
    ("Maintenance", None, Decimal("38250.00")),
    ("Others", "Conveyor belt replacement", Decimal("27500.00")),
]

DAYS = 120


def _local_time_utc(day_offset: int, hour: int) -> datetime:
    """UTC instant for a local wall-clock hour, `day_offset` days before today."""
    minutes = offset_minutes(settings.default_timezone)
    local_now = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    local_day = (local_now - timedelta(days=day_offset)).date()
    return datetime.combine(local_day, time(hour), tzinfo=timezone.utc) - timedelta(minutes=minutes)


async def seed_organizations(session: AsyncSession) -> list[Organization]:
    """Create organizations that do not exist yet. Returns all demo organizations."""
    orgs = []
    for name, location in ORGANIZATIONS:
        result = await session.execute(select(Organization).where(Organization.name == name))
        org = result.scalar_one_or_none()
        if org:
            print(f"  Organization {name!r} already exists, skip.")
        else:
            org = Organization(name=name, location=location, is_active=True)
            session.add(org)
            await session.flush()
            print(f"  Created organization {name!r}.")
        orgs.append(org)
    return orgs


async def seed_entries(session: AsyncSession, org: Organization, scale: Decimal) -> int:
    result = await session.execute(select(TruckEntry.id).where(TruckEntry.organization_id == org.id).limit(1))
    if result.scalar_one_or_none():
        print(f"  Entries for {org.name!r} already exist, skip.")
        return 0

    materials = list(SALES_RATES)
    count = 0
    for day in range(DAYS):
        for slot in range(3):
            material = materials[(day + slot) % len(materials)]
            truck_number, customer = VEHICLES[(day * 3 + slot) % len(VEHICLES)]
            units = Decimal(1 + (day + slot) % 3)
            rate = round_money(SALES_RATES[material] * scale)
            session.add(TruckEntry(
                organization_id=org.id,
                entry_type=EntryType.SALES.value,
                truck_number=truck_number,
                truck_name=customer,
                material_type=material,
                units=units,
                rate_per_unit=rate,
                total_amount=round_money(units * rate),
                entry_date=_local_time_utc(day, 9 + slot * 3),
            ))
            count += 1
        if day % 2 == 0:
            units = Decimal(4 + day % 3)
            session.add(TruckEntry(
                organization_id=org.id,
                entry_type=EntryType.RAW_STONE.value,
                truck_number="TN 70 Q 7001",
                truck_name="Hosur Quarry Supplies",
                material_type="Boulder",
                units=units,
                rate_per_unit=RAW_STONE_RATE,
                total_amount=round_money(units * RAW_STONE_RATE),
                entry_date=_local_time_utc(day, 7),
            ))
            count += 1
    await session.flush()
    print(f"  Created {count} truck entries for {org.name!r}.")
    return count


async def seed_expenses(session: AsyncSession, org: Organization, scale: Decimal) -> int:
    result = await session.execute(select(OtherExpense.id).where(OtherExpense.organization_id == org.id).limit(1))
    if result.scalar_one_or_none():
        print(f"  Expenses for {org.name!r} already exist, skip.")
        return 0

    count = 0
    for day in range(0, DAYS, 30):
        for category, description, amount in MONTHLY_EXPENSES:
            session.add(OtherExpense(
                organization_id=org.id,
                expenses_name=category,
                others=description,
                amount=round_money(amount * scale),
                date=_local_time_utc(day + 1, 11),
                is_active=True,
            ))
            count += 1
    await session.flush()
    print(f"  Created {count} expenses for {org.name!r}.")
    return count


async def run_seed(session: AsyncSession, dry_run: bool) -> None:
    orgs = await seed_organizations(session)
    for index, org in enumerate(orgs):
        # Second site is smaller so that per-organization reports differ
        scale = Decimal("1") if index == 0 else Decimal("0.6")
        await seed_entries(session, org, scale)
        await seed_expenses(session, org, scale)

    if dry_run:
        await session.rollback()
        print("\n[DRY-RUN] Rolled back, no data written.")
    else:
        await session.commit()
        print("\nSeed completed successfully.")


async def main() -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Seed database with demo crusher data")
    parser.add_argument("--dry-run", action="store_true", help="Do not commit")
    parser.add_argument("--confirm", action="store_true", help="Commit changes")
    args = parser.parse_args()
    if not args.dry_run and not args.confirm:
        print("Use --dry-run or --confirm")
        sys.exit(1)

    print("Database:", settings.database_url.split("@")[-1] if "@" in settings.database_url else "?")
    print("Mode:", "DRY-RUN" if args.dry_run else "CONFIRM")
    async with async_session() as session:
        await run_seed(session, dry_run=args.dry_run)
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
