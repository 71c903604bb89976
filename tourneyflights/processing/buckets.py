import calendar
import logging
from datetime import date, timedelta
from typing import Callable, Iterable

from ..models import Airport, Tournament, WeekendBucket, WeekendKey

AirportLookup = Callable[[str, str], Airport | None]

_FRIDAY = 4


def weekend_anchor(d: date) -> date:
    """Friday on or before d."""
    return d - timedelta(days=(d.weekday() - _FRIDAY) % 7)


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = d.year * 12 + d.month - 1 + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def build_weekend_buckets(tournaments: Iterable[Tournament], airport_lookup: AirportLookup) -> list[WeekendBucket]:
    grouped: dict[WeekendKey, list[Tournament]] = {}
    dropped = 0
    for tournament in tournaments:
        airport = airport_lookup(tournament.city, tournament.region)
        if airport is None:
            dropped += 1
            continue
        key = WeekendKey(airport, weekend_anchor(tournament.start_date))
        grouped.setdefault(key, []).append(tournament)
    if dropped:
        logging.debug("%s tournaments without an airport mapping were skipped", dropped)
    return [WeekendBucket(key, tuple(items)) for key, items in grouped.items()]


def filter_by_date_range(
        buckets: Iterable[WeekendBucket],
        months_ahead: int,
        months_back: int = 0,
        today: date | None = None,
) -> list[WeekendBucket]:
    today = today or date.today()
    earliest = add_months(today, -months_back)
    latest = add_months(today, months_ahead)
    return [b for b in buckets if earliest <= b.key.weekend_start <= latest]


def sort_buckets(buckets: Iterable[WeekendBucket]) -> list[WeekendBucket]:
    return sorted(buckets, key=lambda b: (b.key.weekend_start, b.key.airport.code))
