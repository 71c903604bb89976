from datetime import datetime, time
from decimal import Decimal
from typing import Iterable

from ..models import FlightQuote, QuoteQuery, SessionConfig, WeekendQuote

_PROVIDER_TIME_FORMAT = '%Y-%m-%d %H:%M'
_NO_PRICE = Decimal('Infinity')


def parse_local_time(value: str | None) -> time | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, _PROVIDER_TIME_FORMAT).time()
    except ValueError:
        return None


def parse_clock(value: str | None) -> time | None:
    """'HH:MM' config value to time; None/empty means unbounded."""
    if not value:
        return None
    return time.fromisoformat(value.strip())


def within_window(time_text: str, earliest: time | None, latest: time | None) -> bool:
    if earliest is None and latest is None:
        return True
    t = parse_local_time(time_text)
    if t is None:
        return True
    return (earliest is None or t >= earliest) and (latest is None or t <= latest)


def meets_price_criteria(quote: FlightQuote, is_friend_airport: bool, max_price_base: int, max_price_friend: int) -> bool:
    return quote.price <= max_price_base or (is_friend_airport and quote.price <= max_price_friend)


def filter_quotes(quotes: Iterable[WeekendQuote], config: SessionConfig) -> list[WeekendQuote]:
    """Keep priced weekends that pass the base/friend price policy and the outbound departure window."""
    earliest = parse_clock(config.outbound_earliest)
    latest = parse_clock(config.outbound_latest)
    kept = []
    for wq in quotes:
        cheapest = wq.cheapest
        if cheapest is None:
            continue
        if not meets_price_criteria(cheapest, wq.is_friend_airport, config.max_price_base, config.max_price_friend):
            continue
        if within_window(cheapest.outbound_departure_time, earliest, latest):
            kept.append(wq)
    return kept


def filter_by_max_price(quotes: Iterable[WeekendQuote], max_price: int) -> list[WeekendQuote]:
    return [wq for wq in quotes if wq.cheapest is not None and wq.cheapest.price <= max_price]


def filter_by_airport(quotes: Iterable[WeekendQuote], airport_code: str) -> list[WeekendQuote]:
    code = airport_code.strip().upper()
    return [wq for wq in quotes if wq.bucket.key.airport.code == code]


def filter_friend_airports_only(quotes: Iterable[WeekendQuote]) -> list[WeekendQuote]:
    return [wq for wq in quotes if wq.is_friend_airport]


def filter_by_region(quotes: Iterable[WeekendQuote], region: str) -> list[WeekendQuote]:
    region = region.strip().lower()
    return [wq for wq in quotes if any(t.region.lower() == region for t in wq.bucket.tournaments)]


def filter_by_tournament_name(quotes: Iterable[WeekendQuote], name_substring: str) -> list[WeekendQuote]:
    needle = name_substring.lower()
    return [wq for wq in quotes if any(needle in t.name.lower() for t in wq.bucket.tournaments)]


def sort_by_price(quotes: Iterable[WeekendQuote]) -> list[WeekendQuote]:
    return sorted(quotes, key=lambda wq: wq.cheapest.price if wq.cheapest is not None else _NO_PRICE)


def sort_by_date(quotes: Iterable[WeekendQuote]) -> list[WeekendQuote]:
    return sorted(quotes, key=lambda wq: (wq.bucket.key.weekend_start, wq.bucket.key.airport.code))


def apply_query(quotes: Iterable[WeekendQuote], query: QuoteQuery, config: SessionConfig) -> list[WeekendQuote]:
    selected = filter_quotes(quotes, config) if query.filtered else list(quotes)
    if query.airport:
        selected = filter_by_airport(selected, query.airport)
    if query.region:
        selected = filter_by_region(selected, query.region)
    if query.max_price is not None:
        selected = filter_by_max_price(selected, query.max_price)
    if query.search:
        selected = filter_by_tournament_name(selected, query.search)
    if query.friends_only:
        selected = filter_friend_airports_only(selected)
    selected = sort_by_date(selected) if query.sort == 'date' else sort_by_price(selected)
    if query.limit is not None:
        selected = selected[:max(query.limit, 0)]
    return selected
