"""Disk cache of raw provider responses.

One file per (origin, destination, depart, return) route key holding the payload exactly as the provider sent
it. The file's modification time is the only staleness signal; stale files are removed when looked up.
"""

import logging
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable


@dataclass(frozen=True, slots=True)
class CachedPayload:
    payload: str
    age_seconds: int
    cached_at: datetime


class QuoteCache:
    def __init__(self, cache_dir: Path, ttl_seconds: int = 24 * 60 * 60, clock: Callable[[], float] = time.time):
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @staticmethod
    def route_key(origin: str, destination: str, depart: date, ret: date) -> str:
        return f"{origin}_{destination}_{depart.isoformat()}_{ret.isoformat()}.json"

    def path_for(self, route_key: str) -> Path:
        return self.cache_dir / route_key

    def get(self, route_key: str, max_age_seconds: int | None = None) -> CachedPayload | None:
        max_age = self.ttl_seconds if max_age_seconds is None else max_age_seconds
        path = self.path_for(route_key)
        try:
            modified = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            logging.warning("Could not stat cache entry %s: %s", path, exc)
            return None

        age_seconds = max(0, int(self._clock() - modified))
        if age_seconds > max_age:
            logging.info("Cache entry %s is %ss old (ttl %ss), evicting", route_key, age_seconds, max_age)
            self._evict(path)
            return None

        try:
            payload = path.read_text(encoding='utf-8')
        except OSError as exc:
            logging.warning("Could not read cache entry %s: %s", path, exc)
            return None
        cached_at = datetime.fromtimestamp(modified, tz=timezone.utc)
        return CachedPayload(payload=payload, age_seconds=age_seconds, cached_at=cached_at)

    def put(self, route_key: str, payload: str) -> bool:
        path = self.path_for(route_key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding='utf-8')
        except OSError as exc:
            logging.warning("Could not write cache entry %s: %s", path, exc)
            return False
        return True

    @staticmethod
    def _evict(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logging.warning("Could not evict stale cache entry %s: %s", path, exc)
