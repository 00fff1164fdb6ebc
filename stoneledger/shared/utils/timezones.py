"""
Fixed UTC offsets for the zones the business operates in.

Each zone maps to one constant offset in minutes; there is no daylight-saving
table. Names outside the table resolve to UTC (offset 0).
"""

from datetime import datetime, timedelta, timezone

# Minutes east of UTC
TIMEZONE_OFFSETS: dict[str, int] = {
    "UTC": 0,
    "Etc/UTC": 0,
    "Asia/Kolkata": 330,
    "Asia/Calcutta": 330,
    "America/New_York": -300,
    "America/Chicago": -360,
    "America/Los_Angeles": -480,
    "Asia/Tokyo": 540,
    "Europe/London": 0,
    "Europe/Paris": 60,
    "Australia/Sydney": 600,
    "Asia/Dubai": 240,
    "Asia/Singapore": 480,
}

# Common abbreviations accepted from clients
TIMEZONE_ABBREVIATIONS: dict[str, str] = {
    "IST": "Asia/Kolkata",
    "UTC": "UTC",
    "EST": "America/New_York",
    "PST": "America/Los_Angeles",
    "CST": "America/Chicago",
    "JST": "Asia/Tokyo",
    "GMT": "Europe/London",
    "CET": "Europe/Paris",
    "AEST": "Australia/Sydney",
}


def canonical_timezone(name: str | None) -> str:
    """Table key for a zone name or abbreviation; 'UTC' when unknown or empty."""
    if not name:
        return "UTC"
    name = name.strip()
    if name in TIMEZONE_OFFSETS:
        return name
    alias = TIMEZONE_ABBREVIATIONS.get(name.upper())
    if alias:
        return alias
    return "UTC"


def is_known_timezone(name: str | None) -> bool:
    if not name:
        return False
    name = name.strip()
    return name in TIMEZONE_OFFSETS or name.upper() in TIMEZONE_ABBREVIATIONS


def offset_minutes(name: str | None) -> int:
    return TIMEZONE_OFFSETS[canonical_timezone(name)]


def utc_offset(name: str | None) -> timedelta:
    """Fixed offset for the zone; timedelta(0) for names outside the table."""
    return timedelta(minutes=offset_minutes(name))


def format_offset(minutes: int) -> str:
    """330 -> '+05:30', -300 -> '-05:00'."""
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def list_timezones() -> list[dict]:
    """Catalogue for clients: abbreviation, zone name, fixed offset."""
    return [
        {
            "abbreviation": abbreviation,
            "timezone": zone,
            "offset_minutes": TIMEZONE_OFFSETS[zone],
            "utc_offset": format_offset(TIMEZONE_OFFSETS[zone]),
        }
        for abbreviation, zone in TIMEZONE_ABBREVIATIONS.items()
    ]


def to_local(value: datetime, tz_offset_minutes: int) -> datetime:
    """Wall-clock time of a UTC instant under a fixed offset. Naive input is taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc) + timedelta(minutes=tz_offset_minutes)


def local_date(value: datetime, tz_offset_minutes: int = 0, fmt: str = "%d/%m/%Y") -> str:
    return to_local(value, tz_offset_minutes).strftime(fmt)
