"""
Resolve symbolic date filters ("this_week", "last_month", "custom", ...) into
inclusive UTC instant ranges.

Local calendar days are computed in the requested zone using its fixed offset
(see stoneledger.shared.utils.timezones); weeks run Sunday to Saturday. The end
of a range is always 23:59:59.999 local on its last day, never "now".
"""

import re
from calendar import monthrange
from datetime import date, datetime, time, timedelta, timezone

from stoneledger.core.exceptions import InvalidFilterError, InvertedRangeError, MissingBoundsError
from stoneledger.modules.reports.schemas import DateFilterType, ResolvedRange
from stoneledger.shared.utils.timezones import canonical_timezone, offset_minutes, to_local

VALID_FILTERS = [f.value for f in DateFilterType]

END_OF_DAY = time(23, 59, 59, 999000)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

FILTER_TITLES = {
    DateFilterType.TODAY: "Today",
    DateFilterType.YESTERDAY: "Yesterday",
    DateFilterType.THIS_WEEK: "This Week",
    DateFilterType.LAST_WEEK: "Last Week",
    DateFilterType.THIS_MONTH: "This Month",
    DateFilterType.LAST_MONTH: "Last Month",
    DateFilterType.THIS_YEAR: "This Year",
    DateFilterType.LAST_7_DAYS: "Last 7 Days",
    DateFilterType.LAST_30_DAYS: "Last 30 Days",
    DateFilterType.CUSTOM: "Custom Range",
}

_SINGLE_DAY_FILTERS = (DateFilterType.TODAY, DateFilterType.YESTERDAY)


def parse_filter_type(value: str | DateFilterType | None) -> DateFilterType:
    """Filter token from user input; raises InvalidFilterError for anything unknown."""
    if isinstance(value, DateFilterType):
        return value
    token = (value or "").strip().lower()
    try:
        return DateFilterType(token)
    except ValueError:
        raise InvalidFilterError(value or "", VALID_FILTERS) from None


def parse_local_date(value: str | None, field: str) -> date:
    """Strict YYYY-MM-DD parsing for custom bounds."""
    if value is None or not str(value).strip():
        raise MissingBoundsError(field)
    value = str(value).strip()
    if not _DATE_RE.match(value):
        raise MissingBoundsError(field, f"{field} must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise MissingBoundsError(field, f"{field} is not a valid date") from None


def format_display_date(day: date) -> str:
    """Mar 4, 2024"""
    return f"{day:%b} {day.day}, {day.year}"


def describe_range(filter_type: DateFilterType, start_date: date, end_date: date) -> str:
    title = FILTER_TITLES[filter_type]
    if filter_type in _SINGLE_DAY_FILTERS:
        return f"{title} ({format_display_date(start_date)})"
    return f"{title} ({format_display_date(start_date)} - {format_display_date(end_date)})"


def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    days_since_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_since_sunday)


def local_today(now: datetime, tz_offset_minutes: int) -> date:
    return to_local(now, tz_offset_minutes).date()


def _utc_instant(day: date, clock: time, offset: timedelta, field: str) -> datetime:
    try:
        return datetime.combine(day, clock, tzinfo=timezone.utc) - offset
    except OverflowError:
        raise MissingBoundsError(field, f"{field} is out of the supported date range") from None


def local_days_to_range(
    filter_type: DateFilterType,
    start_day: date,
    end_day: date,
    timezone_name: str | None,
) -> ResolvedRange:
    """Convert local calendar days [start_day, end_day] to a UTC instant range."""
    zone = canonical_timezone(timezone_name)
    minutes = offset_minutes(zone)
    offset = timedelta(minutes=minutes)

    start_utc = _utc_instant(start_day, time.min, offset, "start_date")
    end_utc = _utc_instant(end_day, END_OF_DAY, offset, "end_date")
    if start_utc > end_utc:
        raise InvertedRangeError(start_day.isoformat(), end_day.isoformat())

    return ResolvedRange(
        filter_type=filter_type,
        timezone=zone,
        offset_minutes=minutes,
        start_utc=start_utc,
        end_utc=end_utc,
        start_date=start_day,
        end_date=end_day,
        label=describe_range(filter_type, start_day, end_day),
    )


class DateRangeResolver:
    """Turns a filter token, zone and optional bounds into a ResolvedRange."""

    def __init__(self, default_timezone: str = "UTC"):
        self.default_timezone = default_timezone

    def resolve(
        self,
        filter_type: str | DateFilterType,
        timezone_name: str | None = None,
        custom_start: str | None = None,
        custom_end: str | None = None,
        now: datetime | None = None,
    ) -> ResolvedRange:
        token = parse_filter_type(filter_type)
        zone = canonical_timezone(timezone_name or self.default_timezone)
        today = local_today(now or datetime.now(timezone.utc), offset_minutes(zone))

        start_day, end_day = self._local_days(token, today, custom_start, custom_end)
        return local_days_to_range(token, start_day, end_day, zone)

    def _local_days(
        self,
        token: DateFilterType,
        today: date,
        custom_start: str | None,
        custom_end: str | None,
    ) -> tuple[date, date]:
        if token == DateFilterType.TODAY:
            return today, today

        if token == DateFilterType.YESTERDAY:
            yesterday = today - timedelta(days=1)
            return yesterday, yesterday

        if token == DateFilterType.THIS_WEEK:
            start = week_start(today)
            return start, start + timedelta(days=6)

        if token == DateFilterType.LAST_WEEK:
            start = week_start(today) - timedelta(days=7)
            return start, start + timedelta(days=6)

        if token == DateFilterType.THIS_MONTH:
            last_day = monthrange(today.year, today.month)[1]
            return today.replace(day=1), today.replace(day=last_day)

        if token == DateFilterType.LAST_MONTH:
            end = today.replace(day=1) - timedelta(days=1)
            return end.replace(day=1), end

        if token == DateFilterType.THIS_YEAR:
            return date(today.year, 1, 1), date(today.year, 12, 31)

        # Trailing windows include today: 7 days total, not 8
        if token == DateFilterType.LAST_7_DAYS:
            return today - timedelta(days=6), today

        if token == DateFilterType.LAST_30_DAYS:
            return today - timedelta(days=29), today

        return self._custom_days(custom_start, custom_end)

    def _custom_days(self, custom_start: str | None, custom_end: str | None) -> tuple[date, date]:
        start = parse_local_date(custom_start, "start_date")
        end = parse_local_date(custom_end, "end_date")
        if end < start:
            raise InvertedRangeError(start.isoformat(), end.isoformat())
        # Date pickers send the day after a single selected day as an exclusive end.
        if end - start == timedelta(days=1):
            return start, start
        return start, end

    def available_filters(
        self,
        timezone_name: str | None = None,
        now: datetime | None = None,
    ) -> list[ResolvedRange]:
        """Every self-contained filter resolved for the given zone and moment."""
        now = now or datetime.now(timezone.utc)
        return [
            self.resolve(token, timezone_name, now=now)
            for token in DateFilterType
            if token != DateFilterType.CUSTOM
        ]

    def year_range(self, year: int, timezone_name: str | None = None) -> ResolvedRange:
        """Jan 1 - Dec 31 of a local calendar year."""
        zone = canonical_timezone(timezone_name or self.default_timezone)
        return local_days_to_range(DateFilterType.CUSTOM, date(year, 1, 1), date(year, 12, 31), zone)
