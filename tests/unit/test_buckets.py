from datetime import date

from tourneyflights.metro import airport_for
from tourneyflights.models import Airport
from tourneyflights.processing.buckets import (
    add_months,
    build_weekend_buckets,
    filter_by_date_range,
    sort_buckets,
    weekend_anchor,
)


def test_weekend_anchor_is_friday_on_or_before():
    assert weekend_anchor(date(2025, 1, 10)) == date(2025, 1, 10)  # Friday
    assert weekend_anchor(date(2025, 1, 11)) == date(2025, 1, 10)
    assert weekend_anchor(date(2025, 1, 12)) == date(2025, 1, 10)
    assert weekend_anchor(date(2025, 1, 16)) == date(2025, 1, 10)  # Thursday


def test_add_months_clamps_day():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2025, 3, 15), -3) == date(2024, 12, 15)
    assert add_months(date(2024, 11, 30), 14) == date(2026, 1, 30)


def test_same_weekend_same_airport_share_a_bucket(tournaments):
    buckets = build_weekend_buckets(tournaments, airport_for)

    keys = [(b.key.airport.code, b.key.weekend_start) for b in buckets]
    assert keys == [
        ("AUS", date(2025, 1, 10)),
        ("BOS", date(2025, 1, 17)),
        ("DFW", date(2025, 2, 28)),
    ]
    assert [t.name for t in buckets[0].tournaments] == ["Austin Winter Open", "Texas Giant Round Robin"]


def test_unmapped_tournaments_are_dropped(tournaments):
    buckets = build_weekend_buckets(tournaments, airport_for)

    names = {t.name for b in buckets for t in b.tournaments}
    assert "Somewhere Open" not in names
    assert len(names) == 4


def test_custom_lookup_is_used(tournaments):
    buckets = build_weekend_buckets(tournaments, lambda city, region: Airport("XNA"))

    assert {b.key.airport.code for b in buckets} == {"XNA"}
    assert len(buckets) == 3


def test_filter_by_date_range_is_inclusive(buckets):
    today = date(2024, 12, 10)

    in_window = filter_by_date_range(buckets, months_ahead=1, today=today)
    assert [b.key.airport.code for b in in_window] == ["AUS"]

    edge = filter_by_date_range(buckets, months_ahead=1, today=date(2024, 12, 17))
    assert [b.key.airport.code for b in edge] == ["AUS", "BOS"]


def test_filter_by_date_range_lookback(buckets):
    today = date(2025, 3, 1)

    assert filter_by_date_range(buckets, months_ahead=3, today=today) == []
    recent = filter_by_date_range(buckets, months_ahead=3, months_back=1, today=today)
    assert [b.key.airport.code for b in recent] == ["DFW"]


def test_sort_buckets_by_date_then_airport(buckets):
    shuffled = [buckets[2], buckets[1], buckets[0]]
    assert sort_buckets(shuffled) == buckets
