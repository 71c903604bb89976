import logging
from typing import Iterable

import dacite
import requests

from .credentials import CredentialRotator
from ..config import settings
from ..errors import ProviderError
from ..models import AccountInfo, KeyUsage

SERPAPI_ACCOUNT_URL = 'https://serpapi.com/account.json'

# SerpAPI field name -> AccountInfo field name
_FIELD_MAP = {
    'account_email': 'account_email',
    'plan_name': 'plan_name',
    'searches_per_month': 'searches_per_month',
    'plan_searches_left': 'plan_searches_left',
    'extra_credits': 'extra_credits',
    'total_searches_left': 'total_searches_left',
    'this_month_usage': 'this_month_usage',
    'last_hour_searches': 'last_hour_searches',
    'account_rate_limit_per_hour': 'rate_limit_per_hour',
}


class AccountClient:
    """Reads plan and remaining-search numbers for SerpAPI keys. Account lookups are not billed."""

    def __init__(self, http: requests.Session | None = None, timeout: float | None = None,
                 url: str = SERPAPI_ACCOUNT_URL):
        self.http = http or requests.Session()
        self.timeout = settings.request_timeout if timeout is None else timeout
        self.url = url

    @staticmethod
    def parse_account(payload: dict) -> AccountInfo:
        data = {ours: payload.get(theirs) for theirs, ours in _FIELD_MAP.items()}
        try:
            return dacite.from_dict(data_class=AccountInfo, data=data)
        except dacite.DaciteError as exc:
            raise ProviderError(f"Unexpected account payload: {exc}") from exc

    def fetch(self, api_key: str) -> AccountInfo:
        try:
            resp = self.http.get(self.url, params={'api_key': api_key}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(f"Account request failed: {exc}") from exc
        if resp.status_code != 200:
            raise ProviderError(f"API error ({resp.status_code}): {resp.text[:200]}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(f"JSON parse error: {exc}") from exc
        if not isinstance(payload, dict):
            raise ProviderError("Account payload is not a JSON object")
        return self.parse_account(payload)

    def fetch_all(self, keys: Iterable[str]) -> list[KeyUsage]:
        usage = []
        for key in keys:
            masked = CredentialRotator.mask(key)
            try:
                usage.append(KeyUsage(masked_key=masked, info=self.fetch(key)))
            except ProviderError as exc:
                logging.warning("Account lookup failed for key %s: %s", masked, exc)
                usage.append(KeyUsage(masked_key=masked, error=str(exc)))
        return usage


def format_key_usage(usage: list[KeyUsage]) -> str:
    lines = [f"=== API Key Status ({len(usage)} keys) ==="]
    for idx, entry in enumerate(usage, start=1):
        lines.append(f"\n[{idx}] Key: {entry.masked_key}")
        if entry.info is None:
            lines.append(f"  Error: {entry.error}")
            continue
        info = entry.info
        lines.extend([
            f"  Email: {info.account_email}",
            f"  Plan: {info.plan_name}",
            f"  Monthly limit: {info.searches_per_month}",
            f"  Searches left: {info.plan_searches_left}",
            f"  Extra credits: {info.extra_credits}",
            f"  Total left: {info.total_searches_left}",
            f"  This month usage: {info.this_month_usage}",
            f"  Last hour: {info.last_hour_searches}",
            f"  Rate limit/hour: {info.rate_limit_per_hour}",
        ])
    return "\n".join(lines)
