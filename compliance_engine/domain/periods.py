"""Compliance period arithmetic.

Everything here is pure: no clock reads, no I/O. Datetimes are naive local
time. Period ends always carry the 23:59:59.999 time component.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from .enums import Frequency

END_OF_DAY = time(23, 59, 59, 999000)
MONTHLY_CUTOFF_DAY = 15
DUE_DATE_OFFSET_DAYS = 5
FISCAL_YEAR_START_MONTH = 7

_FREQUENCY_ALIASES = {
    "daily": Frequency.DAILY,
    "day": Frequency.DAILY,
    "weekly": Frequency.WEEKLY,
    "week": Frequency.WEEKLY,
    "biweekly": Frequency.BIWEEKLY,
    "fortnightly": Frequency.BIWEEKLY,
    "monthly": Frequency.MONTHLY,
    "month": Frequency.MONTHLY,
    "quarterly": Frequency.QUARTERLY,
    "quarter": Frequency.QUARTERLY,
    "semiannual": Frequency.SEMI_ANNUAL,
    "semiannually": Frequency.SEMI_ANNUAL,
    "biannual": Frequency.SEMI_ANNUAL,
    "biannually": Frequency.SEMI_ANNUAL,
    "halfyearly": Frequency.SEMI_ANNUAL,
    "yearly": Frequency.YEARLY,
    "annual": Frequency.YEARLY,
    "annually": Frequency.YEARLY,
    "year": Frequency.YEARLY,
    "onetime": Frequency.ONE_TIME,
    "once": Frequency.ONE_TIME,
}

_SPAN_DAYS = {
    Frequency.DAILY: 0,
    Frequency.WEEKLY: 6,
    Frequency.BIWEEKLY: 13,
}

_FISCAL_QUALIFIERS = {"fy", "fiscal year"}

# a lone 2-5, so "5 years" counts but "2025" does not
_YEAR_SPAN_RE = re.compile(r"(?<!\d)([2-5])(?!\d)")


@dataclass(frozen=True)
class Recurrence:
    frequency: Frequency
    years: int = 1
    fiscal: bool = False
    previous: bool = False

    @property
    def is_one_time(self) -> bool:
        return self.frequency is Frequency.ONE_TIME


@dataclass(frozen=True)
class CompliancePeriod:
    start: datetime
    end: datetime

    @property
    def year(self) -> str:
        return str(self.start.year)


def parse_frequency(frequency: str | None, duration: str | None = None) -> Optional[Recurrence]:
    """Normalize free-text frequency and duration values.

    Returns None when the frequency is not recognised.
    """
    if not frequency:
        return None
    lowered = frequency.strip().lower()
    canonical = re.sub(r"[\s_-]+", "", lowered)
    resolved = _FREQUENCY_ALIASES.get(canonical)
    span_in_frequency = _year_span(lowered)
    if resolved is None and span_in_frequency and ("year" in lowered or "annual" in lowered):
        resolved = Frequency.YEARLY
    if resolved is None:
        return None

    qualifier = (duration or "").strip().lower()
    if resolved is Frequency.MONTHLY:
        return Recurrence(resolved, previous=qualifier == "previous")
    if resolved is Frequency.YEARLY:
        if qualifier in _FISCAL_QUALIFIERS:
            return Recurrence(resolved, fiscal=True)
        return Recurrence(resolved, years=_year_span(qualifier) or span_in_frequency or 1)
    return Recurrence(resolved)


def is_one_time(frequency: str | None) -> bool:
    recurrence = parse_frequency(frequency)
    return recurrence is not None and recurrence.is_one_time


def next_period(
    frequency: str | None,
    duration: str | None,
    reference: date | datetime,
    today: date | datetime | None = None,
) -> Optional[CompliancePeriod]:
    """Compute the next compliance period after ``reference``.

    ``today`` is the current date the monthly rule looks at; it defaults to
    ``reference``. For monthly templates without the "previous" qualifier the
    month after the reference month is chosen once today is past the 15th,
    otherwise the reference month itself.
    """
    recurrence = parse_frequency(frequency, duration)
    if recurrence is None:
        return None

    ref = _as_date(reference)
    current = _as_date(today) if today is not None else ref
    kind = recurrence.frequency

    if kind in _SPAN_DAYS:
        start = ref + timedelta(days=1)
        end = start + timedelta(days=_SPAN_DAYS[kind])
    elif kind is Frequency.MONTHLY:
        if recurrence.previous:
            year, month = _shift_month(ref.year, ref.month, -1)
        elif current.day > MONTHLY_CUTOFF_DAY:
            year, month = _shift_month(ref.year, ref.month, 1)
        else:
            year, month = ref.year, ref.month
        start = date(year, month, 1)
        end = date(year, month, _days_in_month(year, month))
    elif kind is Frequency.QUARTERLY:
        quarter_start_month = (ref.month - 1) // 3 * 3 + 1
        year, month = _shift_month(ref.year, quarter_start_month, 3)
        start = date(year, month, 1)
        end = _quarter_end(start)
    elif kind is Frequency.SEMI_ANNUAL:
        if ref.month <= 6:
            start = date(ref.year, 7, 1)
        else:
            start = date(ref.year + 1, 1, 1)
        end = _half_end(start)
    elif kind is Frequency.YEARLY:
        if recurrence.fiscal:
            current_fy = ref.year if ref.month >= FISCAL_YEAR_START_MONTH else ref.year - 1
            start = date(current_fy + 1, FISCAL_YEAR_START_MONTH, 1)
            end = _fiscal_year_end(start)
        else:
            start = date(ref.year + 1, 1, 1)
            end = date(start.year + recurrence.years - 1, 12, 31)
    else:
        start = end = ref

    return CompliancePeriod(start_of_day(start), end_of_day(end))


def period_from_start(
    frequency: str | None,
    duration: str | None,
    start: date | datetime,
) -> Optional[CompliancePeriod]:
    """Rebuild the period that begins at ``start`` using the frequency's span rules."""
    recurrence = parse_frequency(frequency, duration)
    if recurrence is None:
        return None

    first = _as_date(start)
    kind = recurrence.frequency

    if kind in _SPAN_DAYS:
        end = first + timedelta(days=_SPAN_DAYS[kind])
    elif kind is Frequency.MONTHLY:
        end = date(first.year, first.month, _days_in_month(first.year, first.month))
    elif kind is Frequency.QUARTERLY:
        end = _quarter_end(first)
    elif kind is Frequency.SEMI_ANNUAL:
        end = _half_end(first)
    elif kind is Frequency.YEARLY:
        if recurrence.fiscal:
            end = _fiscal_year_end(first)
        else:
            end = date(first.year + recurrence.years - 1, 12, 31)
    else:
        end = first

    return CompliancePeriod(start_of_day(first), end_of_day(end))


def period_label(
    start: date | datetime,
    end: date | datetime,
    frequency: str | None,
    duration: str | None = None,
) -> str:
    recurrence = parse_frequency(frequency, duration)
    kind = recurrence.frequency if recurrence else Frequency.MONTHLY
    first = _as_date(start)
    last = _as_date(end)

    if kind is Frequency.QUARTERLY:
        return f"Q{(first.month - 1) // 3 + 1} {first.year}"
    if kind is Frequency.SEMI_ANNUAL:
        return f"H{1 if first.month <= 6 else 2} {first.year}"
    if kind is Frequency.YEARLY:
        if recurrence.fiscal:
            return f"FY {first.year}-{last.year}"
        if last.year > first.year:
            return f"{first.year}-{last.year}"
        return str(first.year)
    if kind is Frequency.ONE_TIME:
        return f"{first:%B %Y} (One-time)"
    if kind is Frequency.DAILY:
        return _day_label(first)
    if kind in (Frequency.WEEKLY, Frequency.BIWEEKLY):
        return f"{_day_label(first)} - {_day_label(last)}"
    return f"{first:%B %Y}"


def due_date_for(end: datetime, offset_days: int = DUE_DATE_OFFSET_DAYS) -> datetime:
    return end - timedelta(days=offset_days)


def start_of_day(value: date | datetime) -> datetime:
    return datetime.combine(_as_date(value), time.min)


def end_of_day(value: date | datetime) -> datetime:
    return datetime.combine(_as_date(value), END_OF_DAY)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _year_span(text: str) -> int | None:
    match = _YEAR_SPAN_RE.search(text)
    return int(match.group(1)) if match else None


def _day_label(value: date) -> str:
    return f"{value.day} {value:%B %Y}"


def _shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    year = year + (month - 1 + months) // 12
    month = (month - 1 + months) % 12 + 1
    return year, month


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day


def _quarter_end(value: date) -> date:
    last_month = (value.month - 1) // 3 * 3 + 3
    return date(value.year, last_month, _days_in_month(value.year, last_month))


def _half_end(value: date) -> date:
    if value.month <= 6:
        return date(value.year, 6, 30)
    return date(value.year, 12, 31)


def _fiscal_year_end(value: date) -> date:
    year = value.year + 1 if value.month >= FISCAL_YEAR_START_MONTH else value.year
    return date(year, FISCAL_YEAR_START_MONTH - 1, 30)
