import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
import requests

# Make the package importable without installation
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from tourneyflights.flights.credentials import CredentialRotator
from tourneyflights.models import Airport, SessionConfig, Tournament, WeekendBucket, WeekendKey
from tourneyflights.sessions.store import SessionState

NOW = 1_736_000_000.0  # 2025-01-04 14:13:20 UTC


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload if payload is not None else {})

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def http(mocker):
    return mocker.Mock(spec=requests.Session)


@pytest.fixture
def serp_payload():
    def build(*prices, other=(), url="https://www.google.com/travel/flights?q=test"):
        def entry(price):
            return {
                "price": price,
                "flights": [
                    {
                        "departure_airport": {"id": "ORD", "time": "2025-01-10 07:15"},
                        "arrival_airport": {"id": "DFW", "time": "2025-01-10 09:40"},
                        "airline": "American",
                    },
                    {
                        "departure_airport": {"id": "DFW", "time": "2025-01-10 10:30"},
                        "arrival_airport": {"id": "AUS", "time": "2025-01-10 11:35"},
                        "airline": "American",
                    },
                ],
            }

        return {
            "search_metadata": {"google_flights_url": url},
            "best_flights": [entry(p) for p in prices],
            "other_flights": [entry(p) for p in other],
        }

    return build


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def tournaments():
    return [
        Tournament("Austin Winter Open", "Austin", "TX", date(2025, 1, 11), date(2025, 1, 12), "01/11/25 - 01/12/25"),
        Tournament("Texas Giant Round Robin", "Austin", "TX", date(2025, 1, 12), date(2025, 1, 12), "01/12/25"),
        Tournament("Boston Classic", "Dedham", "Massachusetts", date(2025, 1, 18), date(2025, 1, 19),
                   "01/18/25 - 01/19/25"),
        Tournament("Plano Spring Open", "Plano", "TX", date(2025, 3, 1), date(2025, 3, 2), "03/01/25 - 03/02/25"),
        Tournament("Somewhere Open", "Nowhere", "ZZ", date(2025, 1, 11), date(2025, 1, 11), "01/11/25"),
    ]


@pytest.fixture
def buckets():
    aus = WeekendBucket(WeekendKey(Airport("AUS"), date(2025, 1, 10)), ())
    bos = WeekendBucket(WeekendKey(Airport("BOS"), date(2025, 1, 17)), ())
    dfw = WeekendBucket(WeekendKey(Airport("DFW"), date(2025, 2, 28)), ())
    return [aus, bos, dfw]


@pytest.fixture
def session_state(buckets):
    def build(keys=("key-one-1234", "key-two-5678"), config=None):
        return SessionState(
            rotator=CredentialRotator(list(keys)),
            config=config or SessionConfig(),
            tournaments=[],
            buckets=list(buckets),
            created_at=datetime.fromtimestamp(NOW, tz=timezone.utc),
        )

    return build
