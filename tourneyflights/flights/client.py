"""SerpAPI Google Flights client.

Round-trip lookups go through the disk cache first; live calls rotate through the session's API keys on
HTTP 429. A failing route never raises: it yields an empty quote list so the rest of a batch can proceed.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any

import requests

from .cache import QuoteCache
from .credentials import CredentialRotator
from ..config import settings
from ..errors import ProviderError, ProviderThrottledError, QuoteParseError
from ..models import CacheProvenance, FlightQuote, cheapest_of

SERPAPI_URL = 'https://serpapi.com/search.json'
QUOTE_FIELDS = ('best_flights', 'other_flights')


def _leg_time(leg: dict[str, Any], airport_field: str) -> str:
    airport = leg.get(airport_field)
    if not isinstance(airport, dict):
        return ''
    value = airport.get('time')
    return value if isinstance(value, str) else ''


def _as_price(value: Any) -> Decimal | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    price = Decimal(str(value))
    if not price.is_finite():
        return None
    return price if price >= 0 else None


def parse_quotes(payload: Any, origin: str, destination: str, depart: date, ret: date) -> list[FlightQuote]:
    """Flatten "best_flights" and "other_flights" into quotes.

    Entries without a finite numeric price or without a list of flight legs are skipped. The outbound departure comes from
    the first leg and the arrival from the last one, so connections are accounted for.
    """
    if not isinstance(payload, dict):
        raise QuoteParseError(f"Expected a JSON object, got {type(payload).__name__}")

    metadata = payload.get('search_metadata')
    booking_url = metadata.get('google_flights_url') if isinstance(metadata, dict) else None

    quotes: list[FlightQuote] = []
    for field_name in QUOTE_FIELDS:
        entries = payload.get(field_name) or []
        if not isinstance(entries, list):
            raise QuoteParseError(f"'{field_name}' is not a list")
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            price = _as_price(entry.get('price'))
            flights = entry.get('flights')
            if not isinstance(flights, list):
                continue
            legs = [leg for leg in flights if isinstance(leg, dict)]
            if price is None or not legs:
                continue
            airline = legs[0].get('airline')
            quotes.append(FlightQuote(
                origin=origin,
                destination=destination,
                departure_date=depart,
                return_date=ret,
                price=price,
                outbound_departure_time=_leg_time(legs[0], 'departure_airport'),
                outbound_arrival_time=_leg_time(legs[-1], 'arrival_airport'),
                airline=airline if isinstance(airline, str) else '',
                booking_url=booking_url if isinstance(booking_url, str) else None,
            ))
    return quotes


def _load_payload(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise QuoteParseError(f"Provider payload is not valid JSON: {exc}") from exc


class QuoteClient:
    def __init__(
            self,
            rotator: CredentialRotator,
            cache: QuoteCache,
            http: requests.Session | None = None,
            timeout: float | None = None,
            base_url: str = SERPAPI_URL,
            currency: str = 'USD',
            language: str = 'en',
    ):
        self.rotator = rotator
        self.cache = cache
        self.http = http or requests.Session()
        self.timeout = settings.request_timeout if timeout is None else timeout
        self.base_url = base_url
        self.currency = currency
        self.language = language

    def _params(self, origin: str, destination: str, depart: date, ret: date, api_key: str) -> dict[str, str]:
        return {
            'engine': 'google_flights',
            'departure_id': origin,
            'arrival_id': destination,
            'outbound_date': depart.isoformat(),
            'return_date': ret.isoformat(),
            'type': '1',
            'currency': self.currency,
            'hl': self.language,
            'api_key': api_key,
        }

    def _request(self, params: dict[str, str]) -> str:
        try:
            resp = self.http.get(self.base_url, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            raise ProviderError(f"SerpAPI request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"SerpAPI request failed: {exc}") from exc

        if resp.status_code == 429:
            raise ProviderThrottledError("SerpAPI rate limit reached")
        if not 200 <= resp.status_code < 300:
            raise ProviderError(f"SerpAPI error ({resp.status_code}): {resp.text[:200]}")
        return resp.text

    def _fetch_live(self, origin: str, destination: str, depart: date, ret: date) -> str | None:
        for _ in range(len(self.rotator)):
            api_key = self.rotator.current()
            logging.info("Calling SerpAPI for %s -> %s (%s to %s) with %s",
                         origin, destination, depart, ret, self.rotator.describe_current())
            try:
                return self._request(self._params(origin, destination, depart, ret, api_key))
            except ProviderThrottledError:
                if not self.rotator.advance():
                    logging.warning("All %s API keys exhausted (429 on all), no quotes for %s -> %s on %s",
                                    len(self.rotator), origin, destination, depart)
                    return None
                logging.warning("Rate limited (429), rotating to %s", self.rotator.describe_current())
            except ProviderError as exc:
                logging.error("%s -> %s on %s: %s", origin, destination, depart, exc)
                return None
        return None

    def fetch_round_trip(
            self, origin: str, destination: str, depart: date, ret: date, skip_cache: bool = False
    ) -> tuple[list[FlightQuote], CacheProvenance]:
        route_key = self.cache.route_key(origin, destination, depart, ret)

        if not skip_cache:
            cached = self.cache.get(route_key)
            if cached is not None:
                try:
                    quotes = parse_quotes(_load_payload(cached.payload), origin, destination, depart, ret)
                except QuoteParseError as exc:
                    logging.warning("Ignoring unreadable cache entry %s: %s", route_key, exc)
                else:
                    logging.info("Using cached flights for %s -> %s (%s to %s) [age: %ss]",
                                 origin, destination, depart, ret, cached.age_seconds)
                    return quotes, CacheProvenance.cached(cached.age_seconds, cached.cached_at)

        text = self._fetch_live(origin, destination, depart, ret)
        if text is None:
            return [], CacheProvenance.fresh()

        try:
            payload = _load_payload(text)
            quotes = parse_quotes(payload, origin, destination, depart, ret)
        except QuoteParseError as exc:
            logging.error("Unusable SerpAPI payload for %s -> %s on %s: %s", origin, destination, depart, exc)
            return [], CacheProvenance.fresh()

        if isinstance(payload, dict) and payload.get('error'):
            logging.warning("SerpAPI reported for %s -> %s on %s: %s", origin, destination, depart, payload['error'])
        self.cache.put(route_key, text)
        return quotes, CacheProvenance.fresh()

    def cheapest_round_trip(
            self, origin: str, destination: str, depart: date, ret: date, skip_cache: bool = False
    ) -> FlightQuote | None:
        quotes, _ = self.fetch_round_trip(origin, destination, depart, ret, skip_cache)
        return cheapest_of(quotes)
