"""Scraper for the omnipong tournament listing.

The page holds one table per heading: "USATT Events" rows carry "City, ST" locations, every other heading is
itself the region (e.g. a country) and the location cell is just the city.
"""

import logging
from datetime import date, datetime

import requests
from bs4 import BeautifulSoup, Tag

from ..config import settings
from ..errors import TournamentSourceError
from ..models import Tournament

USATT_HEADING = 'USATT Events'
_DATE_FORMAT = '%m/%d/%y'


def parse_date_range(text: str) -> tuple[date, date]:
    parts = [p.strip() for p in text.split('-') if p.strip()]
    if not parts or len(parts) > 2:
        raise ValueError(f"Unrecognised date text: {text!r}")
    start = datetime.strptime(parts[0], _DATE_FORMAT).date()
    end = datetime.strptime(parts[-1], _DATE_FORMAT).date()
    return start, end


def _heading_for(table: Tag) -> str:
    heading = table.find_previous_sibling('h3')
    return heading.get_text(strip=True) if heading else ''


def _split_location(location: str, heading: str) -> tuple[str, str]:
    if heading != USATT_HEADING:
        return location, heading
    parts = [p.strip() for p in location.split(',')]
    if len(parts) >= 2:
        return parts[0], parts[1]
    return location, ''


def parse_tournaments(html: str) -> list[Tournament]:
    soup = BeautifulSoup(html, 'lxml')
    container = soup.select_one('td.omnipong')
    if container is None:
        logging.warning("Tournament listing container not found")
        return []

    tournaments: list[Tournament] = []
    for table in container.select('table.omnipong'):
        heading = _heading_for(table)
        for row in table.find_all('tr')[1:]:
            cells = row.find_all('td')
            if len(cells) < 5:
                continue
            name, location, date_text = (cells[i].get_text(' ', strip=True) for i in (2, 3, 4))
            if not (name and location and date_text):
                continue
            try:
                start, end = parse_date_range(date_text)
            except ValueError:
                logging.warning("Skipping %s: unparseable dates %r", name, date_text)
                continue
            city, region = _split_location(location, heading)
            tournaments.append(Tournament(name, city, region, start, end, date_text))
    return tournaments


def fetch_tournaments(
        url: str | None = None,
        http: requests.Session | None = None,
        timeout: float | None = None,
) -> list[Tournament]:
    url = url or settings.tournament_url
    http = http or requests.Session()
    timeout = settings.request_timeout if timeout is None else timeout
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise TournamentSourceError(f"Failed to load tournaments from {url}: {exc}") from exc
    tournaments = parse_tournaments(resp.text)
    logging.info("Loaded %s tournaments from %s", len(tournaments), url)
    return tournaments
