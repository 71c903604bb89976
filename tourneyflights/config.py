"""Configuration utilities.

Central place to load environment driven settings (provider keys, origin airport, cache and session lifetimes).
Avoids scattering os.getenv calls around the codebase.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .models import SessionConfig

# Load .env once on module import
load_dotenv()


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(slots=True)
class Settings:
    api_keys: tuple[str, ...] = _split_csv(os.getenv("SERPAPI_KEYS"))
    origin_airport: str = os.getenv("ORIGIN_AIRPORT", "ORD")
    friend_airports: tuple[str, ...] = _split_csv(os.getenv("FRIEND_AIRPORTS", "BOS,AUS,LAX"))
    filter_months: int = int(os.getenv("FILTER_MONTHS", "3"))
    lookback_months: int = int(os.getenv("LOOKBACK_MONTHS", "0"))
    trip_days: int = int(os.getenv("TRIP_DAYS", "2"))
    max_api_calls_per_run: int = int(os.getenv("MAX_API_CALLS_PER_RUN", "150"))
    max_price_base: int = int(os.getenv("MAX_PRICE_BASE", "150"))
    max_price_friend: int = int(os.getenv("MAX_PRICE_FRIEND", "250"))
    outbound_earliest: str | None = os.getenv("OUTBOUND_EARLIEST") or None
    outbound_latest: str | None = os.getenv("OUTBOUND_LATEST") or None
    cache_dir: Path = Path(os.getenv("CACHE_DIR", "flight_cache"))
    cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", str(24 * 60 * 60)))
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "30"))
    tournament_url: str = os.getenv("TOURNAMENT_URL", "https://omnipong.com/t-tourney.asp?e=0")
    output_md: Path = Path(os.getenv("OUTPUT_MD", "weekend_quotes.md"))
    # CSV output is opt-in
    output_csv: Path | None = Path(os.environ["OUTPUT_CSV"]) if os.getenv("OUTPUT_CSV") else None

    def default_session_config(self) -> SessionConfig:
        return SessionConfig(
            origin_airport=self.origin_airport,
            friend_airports=list(self.friend_airports),
            lookback_months=self.lookback_months,
            filter_months=self.filter_months,
            trip_days=self.trip_days,
            max_results=self.max_api_calls_per_run,
            max_price_base=self.max_price_base,
            max_price_friend=self.max_price_friend,
            outbound_earliest=self.outbound_earliest,
            outbound_latest=self.outbound_latest,
        )


settings = Settings()
