"""Session lifecycle and read-side queries, the surface a CLI or HTTP layer talks to."""

import logging
from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from typing import Any, Callable, Iterator, Sequence

import dacite

from .search import SearchOrchestrator
from .store import SessionState, SessionStore
from ..config import settings
from ..errors import InvalidCredentialsError, InvalidSessionConfigError
from ..flights.account import AccountClient
from ..flights.credentials import CredentialRotator
from ..metro import airport_for
from ..models import (
    Airport,
    KeyUsage,
    QuoteQuery,
    SearchEvent,
    SearchFilters,
    SearchResponse,
    SessionConfig,
    Tournament,
    WeekendBucket,
    WeekendQuote,
)
from ..processing.buckets import AirportLookup, build_weekend_buckets, filter_by_date_range, sort_buckets
from ..processing.filters import apply_query, parse_clock
from ..scraping.tournaments import fetch_tournaments

TournamentSource = Callable[[], list[Tournament]]


@dataclass(frozen=True, slots=True)
class SessionInfo:
    session_id: str
    config: SessionConfig
    created_at: datetime
    expires_at: datetime
    total_tournaments: int
    total_buckets: int
    quotes_loaded: int
    api_key_count: int


def build_session_config(base: SessionConfig, changes: dict[str, Any] | None) -> SessionConfig:
    """Overlay caller-supplied values on base. Unknown keys and wrong types are rejected."""
    data = asdict(base)
    data.update(changes or {})
    try:
        config = dacite.from_dict(data_class=SessionConfig, data=data, config=dacite.Config(strict=True))
    except dacite.DaciteError as exc:
        raise InvalidSessionConfigError(f"Invalid session config: {exc}") from exc

    try:
        config.origin_airport = Airport(config.origin_airport).code
        config.friend_airports = [Airport(code).code for code in config.friend_airports]
        parse_clock(config.outbound_earliest)
        parse_clock(config.outbound_latest)
    except ValueError as exc:
        raise InvalidSessionConfigError(f"Invalid session config: {exc}") from exc

    for name in ('lookback_months', 'filter_months', 'trip_days', 'max_price_base', 'max_price_friend'):
        if getattr(config, name) < 0:
            raise InvalidSessionConfigError(f"{name} must not be negative")
    if config.max_results < 1:
        raise InvalidSessionConfigError("max_results must be at least 1")
    return config


class SessionManager:
    def __init__(
            self,
            store: SessionStore,
            orchestrator: SearchOrchestrator,
            tournament_source: TournamentSource = fetch_tournaments,
            airport_lookup: AirportLookup = airport_for,
            account_client: AccountClient | None = None,
            defaults: SessionConfig | None = None,
            today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.tournament_source = tournament_source
        self.airport_lookup = airport_lookup
        self.account_client = account_client or AccountClient()
        self.defaults = defaults or settings.default_session_config()
        self.today = today

    # ---------------- lifecycle -----------------
    def create_session(self, api_keys: Sequence[str], config: dict[str, Any] | None = None) -> SessionInfo:
        keys = [k.strip() for k in api_keys if k and k.strip()]
        if not keys:
            raise InvalidCredentialsError("apiKeys list cannot be empty")
        session_config = build_session_config(self.defaults, config)

        tournaments = self.tournament_source()
        buckets = sort_buckets(build_weekend_buckets(tournaments, self.airport_lookup))
        state = SessionState(
            rotator=CredentialRotator(keys),
            config=session_config,
            tournaments=tournaments,
            buckets=buckets,
            created_at=self.store.now(),
        )
        session_id = self.store.create(state)
        logging.info("Session %s: %s tournaments in %s weekend buckets", session_id, len(tournaments), len(buckets))
        return self._info(session_id, state)

    def session_info(self, session_id: str) -> SessionInfo:
        return self._info(session_id, self.store.get(session_id))

    def update_config(self, session_id: str, changes: dict[str, Any]) -> SessionConfig:
        updated = self.store.update(
            session_id, lambda state: replace(state, config=build_session_config(state.config, changes))
        )
        return updated.config

    def end_session(self, session_id: str) -> bool:
        return self.store.delete(session_id)

    def active_sessions(self) -> int:
        return self.store.active_count()

    def _info(self, session_id: str, state: SessionState) -> SessionInfo:
        return SessionInfo(
            session_id=session_id,
            config=state.config,
            created_at=state.created_at,
            expires_at=self.store.expires_at(state),
            total_tournaments=len(state.tournaments),
            total_buckets=len(state.buckets),
            quotes_loaded=len(state.quotes),
            api_key_count=len(state.rotator),
        )

    # ---------------- search -----------------
    def search(self, session_id: str, filters: SearchFilters) -> SearchResponse:
        return self.orchestrator.search(session_id, filters)

    def stream_search(self, session_id: str, filters: SearchFilters) -> Iterator[SearchEvent]:
        return self.orchestrator.stream(session_id, filters)

    # ---------------- queries -----------------
    def quotes(self, session_id: str, query: QuoteQuery | None = None) -> list[WeekendQuote]:
        state = self.store.get(session_id)
        friends = {code.upper() for code in state.config.friend_airports}
        current = [
            replace(wq, is_friend_airport=wq.bucket.key.airport.code in friends) for wq in state.quotes.values()
        ]
        return apply_query(current, query or QuoteQuery(), state.config)

    def buckets(self, session_id: str, in_window: bool = False) -> list[WeekendBucket]:
        state = self.store.get(session_id)
        if not in_window:
            return list(state.buckets)
        config = state.config
        return filter_by_date_range(state.buckets, config.filter_months, config.lookback_months, self.today())

    def airports(self, session_id: str) -> list[str]:
        return sorted({b.key.airport.code for b in self.store.get(session_id).buckets})

    def regions(self, session_id: str) -> list[str]:
        return sorted({t.region for t in self.store.get(session_id).tournaments if t.region})

    def tournament_names(self, session_id: str) -> list[str]:
        return sorted({t.name for t in self.store.get(session_id).tournaments})

    def key_usage(self, session_id: str) -> list[KeyUsage]:
        return self.account_client.fetch_all(self.store.get(session_id).rotator.keys)
