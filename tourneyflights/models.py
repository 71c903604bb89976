from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, TypeAlias


@dataclass(frozen=True, slots=True)
class Airport:
    """IATA location code, always three upper-case letters."""
    code: str

    def __post_init__(self) -> None:
        code = self.code.strip().upper() if isinstance(self.code, str) else ''
        if len(code) != 3 or not code.isascii() or not code.isalpha():
            raise ValueError(f"Invalid airport code: {self.code!r}")
        object.__setattr__(self, 'code', code)

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Tournament:
    name: str
    city: str
    region: str
    start_date: date
    end_date: date
    raw_date_text: str = ''


@dataclass(frozen=True, slots=True)
class WeekendKey:
    """Grouping key: destination airport plus the Friday on/before the tournament start."""
    airport: Airport
    weekend_start: date


@dataclass(frozen=True, slots=True)
class WeekendBucket:
    key: WeekendKey
    tournaments: tuple[Tournament, ...]


@dataclass(frozen=True, slots=True)
class FlightQuote:
    """Single priced round-trip itinerary as returned by the provider.

    outbound_departure_time is the first leg's departure and outbound_arrival_time the last leg's arrival,
    both kept in the provider's "YYYY-MM-DD HH:MM" text form.
    """
    origin: str
    destination: str
    departure_date: date
    return_date: date
    price: Decimal
    outbound_departure_time: str
    outbound_arrival_time: str
    airline: str
    booking_url: str | None = None

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"Negative price {self.price} for {self.origin}->{self.destination}")


@dataclass(frozen=True, slots=True)
class CacheProvenance:
    from_cache: bool
    cache_age_seconds: int | None = None
    cached_at: datetime | None = None

    @classmethod
    def fresh(cls) -> 'CacheProvenance':
        return cls(from_cache=False)

    @classmethod
    def cached(cls, age_seconds: int, cached_at: datetime) -> 'CacheProvenance':
        return cls(from_cache=True, cache_age_seconds=age_seconds, cached_at=cached_at)


def cheapest_of(quotes: tuple[FlightQuote, ...] | list[FlightQuote]) -> FlightQuote | None:
    return min(quotes, key=lambda q: q.price, default=None)


@dataclass(frozen=True, slots=True)
class SearchCandidate:
    origin: str
    destination: Airport
    departure_date: date
    return_date: date


@dataclass(frozen=True, slots=True)
class SearchResult:
    origin: str
    destination: str
    departure_date: date
    return_date: date
    quotes: tuple[FlightQuote, ...]
    provenance: CacheProvenance

    @property
    def cheapest(self) -> FlightQuote | None:
        return cheapest_of(self.quotes)


@dataclass(frozen=True, slots=True)
class WeekendQuote:
    """Accumulated search outcome for one weekend bucket."""
    bucket: WeekendBucket
    quotes: tuple[FlightQuote, ...]
    provenance: CacheProvenance
    is_friend_airport: bool = False

    @property
    def cheapest(self) -> FlightQuote | None:
        return cheapest_of(self.quotes)


@dataclass(slots=True)
class SessionConfig:
    origin_airport: str = 'ORD'
    friend_airports: list[str] = field(default_factory=lambda: ['BOS', 'AUS', 'LAX'])
    lookback_months: int = 0
    filter_months: int = 3
    trip_days: int = 2
    max_results: int = 150
    max_price_base: int = 150
    max_price_friend: int = 250
    outbound_earliest: str | None = None
    outbound_latest: str | None = None


@dataclass(frozen=True, slots=True)
class SearchFilters:
    origin_airport: str | None = None
    destination_airport: str | None = None
    departure_date: date | None = None
    return_date: date | None = None
    max_results: int | None = None
    skip_cache: bool = False


@dataclass(frozen=True, slots=True)
class SearchResponse:
    results: tuple[SearchResult, ...]
    total_quotes: int


@dataclass(frozen=True, slots=True)
class SearchProgress:
    current: int
    total: int
    destination: str
    departure_date: date
    from_cache: bool
    price: Decimal | None


@dataclass(frozen=True, slots=True)
class SearchComplete:
    response: SearchResponse


@dataclass(frozen=True, slots=True)
class SearchFailed:
    error: str


SearchEvent: TypeAlias = SearchProgress | SearchComplete | SearchFailed


@dataclass(frozen=True, slots=True)
class QuoteQuery:
    airport: str | None = None
    region: str | None = None
    max_price: int | None = None
    search: str | None = None
    friends_only: bool = False
    filtered: bool = False
    sort: Literal['price', 'date'] = 'price'
    limit: int | None = None


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """SerpAPI plan and usage numbers for a single key."""
    account_email: str
    plan_name: str
    searches_per_month: int
    plan_searches_left: int
    extra_credits: int
    total_searches_left: int
    this_month_usage: int
    last_hour_searches: int
    rate_limit_per_hour: int


@dataclass(frozen=True, slots=True)
class KeyUsage:
    masked_key: str
    info: AccountInfo | None = None
    error: str | None = None
