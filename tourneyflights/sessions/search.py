"""Flight search over a session's weekend buckets.

Lookups run strictly one after another: a session owns a handful of API keys and the provider throttles per
key, so parallel fan-out would only burn through the keys faster. Results are merged into the session's
accumulated quotes per weekend key, newest result wins.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Iterator

import requests

from .store import SessionState, SessionStore
from ..config import settings
from ..errors import InvalidSearchError, TourneyFlightsError
from ..flights.cache import QuoteCache
from ..flights.client import QuoteClient
from ..flights.credentials import CredentialRotator
from ..models import (
    Airport,
    SearchCandidate,
    SearchComplete,
    SearchEvent,
    SearchFailed,
    SearchFilters,
    SearchProgress,
    SearchResponse,
    SearchResult,
    WeekendKey,
    WeekendQuote,
)
from ..processing.buckets import filter_by_date_range

ClientFactory = Callable[[CredentialRotator], QuoteClient]


def default_client_factory(cache: QuoteCache | None = None, http: requests.Session | None = None) -> ClientFactory:
    """Clients share one disk cache and HTTP connection pool but use the session's own rotator."""
    cache = cache or QuoteCache(settings.cache_dir, settings.cache_ttl_seconds)
    http = http or requests.Session()

    def factory(rotator: CredentialRotator) -> QuoteClient:
        return QuoteClient(rotator, cache, http=http)

    return factory


def _airport(code: str, label: str) -> Airport:
    try:
        return Airport(code)
    except ValueError as exc:
        raise InvalidSearchError(f"{label}: {exc}") from exc


class SearchOrchestrator:
    def __init__(self, store: SessionStore, client_factory: ClientFactory | None = None,
                 today: Callable[[], date] = date.today):
        self.store = store
        self.client_factory = client_factory or default_client_factory()
        self.today = today

    # ---------------- candidates -----------------
    def resolve_candidates(self, state: SessionState, filters: SearchFilters) -> list[SearchCandidate]:
        config = state.config
        origin = _airport(filters.origin_airport or config.origin_airport, 'origin airport').code
        destination = (
            _airport(filters.destination_airport, 'destination airport') if filters.destination_airport else None
        )
        depart = filters.departure_date
        if filters.return_date is not None and depart is None:
            raise InvalidSearchError("A return date needs a departure date")
        if filters.max_results is not None and filters.max_results < 1:
            raise InvalidSearchError(f"max_results must be positive, got {filters.max_results}")

        def return_for(d: date) -> date:
            ret = filters.return_date or d + timedelta(days=config.trip_days)
            if ret < d:
                raise InvalidSearchError(f"Return date {ret} is before departure {d}")
            return ret

        if destination is not None and depart is not None:
            candidates = [SearchCandidate(origin, destination, depart, return_for(depart))]
        else:
            window = filter_by_date_range(state.buckets, config.filter_months, config.lookback_months, self.today())
            if destination is not None:
                window = [b for b in window if b.key.airport == destination]
            elif depart is not None:
                window = [b for b in window if b.key.weekend_start == depart]
            candidates = [
                SearchCandidate(origin, b.key.airport, b.key.weekend_start, return_for(b.key.weekend_start))
                for b in window
            ]

        limit = filters.max_results if filters.max_results is not None else config.max_results
        return candidates[:limit]

    # ---------------- lookups -----------------
    @staticmethod
    def _resolve(client: QuoteClient, candidate: SearchCandidate, skip_cache: bool) -> SearchResult:
        quotes, provenance = client.fetch_round_trip(
            candidate.origin,
            candidate.destination.code,
            candidate.departure_date,
            candidate.return_date,
            skip_cache=skip_cache,
        )
        return SearchResult(
            origin=candidate.origin,
            destination=candidate.destination.code,
            departure_date=candidate.departure_date,
            return_date=candidate.return_date,
            quotes=tuple(quotes),
            provenance=provenance,
        )

    def _prepare(self, session_id: str, filters: SearchFilters) -> tuple[QuoteClient, list[SearchCandidate]]:
        state = self.store.get(session_id)
        candidates = self.resolve_candidates(state, filters)
        state.rotator.reset()
        logging.info("Session %s: searching %s candidate(s)%s", session_id, len(candidates),
                     " (cache bypassed)" if filters.skip_cache else "")
        return self.client_factory(state.rotator), candidates

    def _merge(self, session_id: str, results: list[SearchResult]) -> SearchResponse:
        def apply(state: SessionState) -> SessionState:
            index = state.bucket_index()
            friends = {code.upper() for code in state.config.friend_airports}
            merged = dict(state.quotes)
            for result in results:
                key = WeekendKey(Airport(result.destination), result.departure_date)
                bucket = index.get(key)
                if bucket is None:
                    continue
                merged[key] = WeekendQuote(bucket, result.quotes, result.provenance, key.airport.code in friends)
            return replace(state, quotes=merged)

        self.store.update(session_id, apply)
        return SearchResponse(results=tuple(results), total_quotes=sum(len(r.quotes) for r in results))

    # ---------------- public API -----------------
    def search(self, session_id: str, filters: SearchFilters) -> SearchResponse:
        client, candidates = self._prepare(session_id, filters)
        results = [self._resolve(client, c, filters.skip_cache) for c in candidates]
        return self._merge(session_id, results)

    def stream(self, session_id: str, filters: SearchFilters) -> Iterator[SearchEvent]:
        """Yield one SearchProgress per candidate, then a single SearchComplete (or SearchFailed).

        The merge happens before SearchComplete is yielded; closing the iterator earlier leaves the session as it
        was.
        """
        try:
            client, candidates = self._prepare(session_id, filters)
            results: list[SearchResult] = []
            total = len(candidates)
            for current, candidate in enumerate(candidates, start=1):
                result = self._resolve(client, candidate, filters.skip_cache)
                results.append(result)
                cheapest = result.cheapest
                yield SearchProgress(
                    current=current,
                    total=total,
                    destination=result.destination,
                    departure_date=result.departure_date,
                    from_cache=result.provenance.from_cache,
                    price=cheapest.price if cheapest else None,
                )
            response = self._merge(session_id, results)
        except TourneyFlightsError as exc:
            logging.error("Session %s: search failed: %s", session_id, exc)
            yield SearchFailed(error=str(exc))
            return
        yield SearchComplete(response=response)
