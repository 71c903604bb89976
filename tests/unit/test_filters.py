from datetime import date, time
from decimal import Decimal

import pytest

from tourneyflights.models import (
    Airport,
    CacheProvenance,
    FlightQuote,
    QuoteQuery,
    SessionConfig,
    Tournament,
    WeekendBucket,
    WeekendKey,
    WeekendQuote,
)
from tourneyflights.processing.filters import (
    apply_query,
    filter_quotes,
    meets_price_criteria,
    parse_clock,
    sort_by_price,
    within_window,
)


def _quote(dest, price, departs="2025-01-10 07:15"):
    return FlightQuote("ORD", dest, date(2025, 1, 10), date(2025, 1, 12), Decimal(price), departs,
                       "2025-01-10 11:35", "American")


def _weekend(dest, weekend_start, *prices, friend=False, tournament="Open", region="TX", departs="2025-01-10 07:15"):
    bucket = WeekendBucket(
        WeekendKey(Airport(dest), weekend_start),
        (Tournament(tournament, "City", region, weekend_start, weekend_start),),
    )
    quotes = tuple(_quote(dest, p, departs) for p in prices)
    return WeekendQuote(bucket, quotes, CacheProvenance.fresh(), is_friend_airport=friend)


@pytest.fixture
def weekend_quotes():
    return [
        _weekend("AUS", date(2025, 1, 10), 180, 240, friend=True, tournament="Austin Winter Open"),
        _weekend("DFW", date(2025, 2, 28), 120, tournament="Plano Spring Open"),
        _weekend("BOS", date(2025, 1, 17), 260, friend=True, tournament="Boston Classic", region="MA"),
        _weekend("SEA", date(2025, 1, 24), tournament="Bellevue Open", region="WA"),
        _weekend("DTW", date(2025, 1, 31), 149, tournament="Brighton Open", region="MI", departs="2025-01-31 05:30"),
    ]


def test_price_policy_base_and_friend():
    cheap = _quote("DFW", 150)
    mid = _quote("AUS", 250)

    assert meets_price_criteria(cheap, False, 150, 250)
    assert not meets_price_criteria(mid, False, 150, 250)
    assert meets_price_criteria(mid, True, 150, 250)
    assert not meets_price_criteria(_quote("AUS", 251), True, 150, 250)


def test_within_window():
    assert within_window("2025-01-10 07:15", time(6, 0), time(12, 0))
    assert not within_window("2025-01-10 05:30", time(6, 0), None)
    assert not within_window("2025-01-10 21:00", None, time(20, 0))
    assert within_window("garbled", time(6, 0), time(12, 0))
    assert within_window("2025-01-10 05:30", None, None)


def test_parse_clock():
    assert parse_clock("06:30") == time(6, 30)
    assert parse_clock("") is None
    assert parse_clock(None) is None


def test_filter_quotes_applies_price_and_window(weekend_quotes):
    config = SessionConfig(outbound_earliest="06:00")

    kept = filter_quotes(weekend_quotes, config)

    assert [wq.bucket.key.airport.code for wq in kept] == ["AUS", "DFW"]


def test_sort_by_price_puts_unpriced_last(weekend_quotes):
    ordered = sort_by_price(weekend_quotes)

    assert [wq.bucket.key.airport.code for wq in ordered] == ["DFW", "DTW", "AUS", "BOS", "SEA"]


def test_apply_query_date_sort_and_limit(weekend_quotes):
    result = apply_query(weekend_quotes, QuoteQuery(sort="date", limit=2), SessionConfig())

    assert [wq.bucket.key.airport.code for wq in result] == ["AUS", "BOS"]


def test_apply_query_combined_filters(weekend_quotes):
    config = SessionConfig()

    assert [wq.bucket.key.airport.code for wq in apply_query(weekend_quotes, QuoteQuery(region="tx"), config)] == [
        "DFW", "AUS"]
    assert [wq.bucket.key.airport.code for wq in apply_query(weekend_quotes, QuoteQuery(max_price=200), config)] == [
        "DFW", "DTW", "AUS"]
    assert [wq.bucket.key.airport.code for wq in apply_query(weekend_quotes, QuoteQuery(search="open"), config)] == [
        "DFW", "DTW", "AUS", "SEA"]
    friends = apply_query(weekend_quotes, QuoteQuery(friends_only=True, airport="bos"), config)
    assert [wq.bucket.key.airport.code for wq in friends] == ["BOS"]


def test_apply_query_filtered_uses_config(weekend_quotes):
    strict = SessionConfig(max_price_base=100, max_price_friend=200)

    result = apply_query(weekend_quotes, QuoteQuery(filtered=True), strict)

    assert [wq.bucket.key.airport.code for wq in result] == ["AUS"]
