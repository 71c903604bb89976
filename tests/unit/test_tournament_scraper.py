from datetime import date

import pytest
import requests

from tourneyflights.errors import TournamentSourceError
from tourneyflights.scraping.tournaments import fetch_tournaments, parse_date_range, parse_tournaments

LISTING = """
<html><body><table><tr>
<td class="omnipong">
  <h3>USATT Events</h3>
  <table class="omnipong">
    <tr><th>Entry</th><th>Star</th><th>Tournament</th><th>Location</th><th>Date</th></tr>
    <tr><td>Enter</td><td>*</td><td>Austin Winter Open</td><td>Austin, TX</td><td>01/11/25 - 01/12/25</td></tr>
    <tr><td>Enter</td><td></td><td>Boston Classic</td><td>Dedham, MA</td><td>01/18/25</td></tr>
    <tr><td>Enter</td><td></td><td>Broken Dates Open</td><td>Plano, TX</td><td>sometime soon</td></tr>
    <tr><td>only</td><td>three</td><td>cells</td></tr>
  </table>
  <h3>Brazil</h3>
  <table class="omnipong">
    <tr><th>Entry</th><th>Star</th><th>Tournament</th><th>Location</th><th>Date</th></tr>
    <tr><td>Enter</td><td></td><td>Copa Sul</td><td>Tres Coroas</td><td>02/07/25 - 02/09/25</td></tr>
  </table>
</td>
</tr></table></body></html>
"""


def test_parse_date_range():
    assert parse_date_range("01/11/25 - 01/12/25") == (date(2025, 1, 11), date(2025, 1, 12))
    assert parse_date_range("01/18/25") == (date(2025, 1, 18), date(2025, 1, 18))
    with pytest.raises(ValueError):
        parse_date_range("tbd")


def test_parse_tournaments_reads_each_section():
    tournaments = parse_tournaments(LISTING)

    assert [(t.name, t.city, t.region) for t in tournaments] == [
        ("Austin Winter Open", "Austin", "TX"),
        ("Boston Classic", "Dedham", "MA"),
        ("Copa Sul", "Tres Coroas", "Brazil"),
    ]
    assert tournaments[0].start_date == date(2025, 1, 11)
    assert tournaments[0].end_date == date(2025, 1, 12)
    assert tournaments[0].raw_date_text == "01/11/25 - 01/12/25"


def test_parse_tournaments_without_listing():
    assert parse_tournaments("<html><body><p>maintenance</p></body></html>") == []


def test_fetch_tournaments(http, make_response):
    http.get.return_value = make_response(200, text=LISTING)

    tournaments = fetch_tournaments("https://example.test/tournaments", http=http, timeout=3)

    http.get.assert_called_once_with("https://example.test/tournaments", timeout=3)
    assert len(tournaments) == 3


def test_fetch_tournaments_http_error(http, make_response):
    http.get.return_value = make_response(503, text="unavailable")

    with pytest.raises(TournamentSourceError):
        fetch_tournaments("https://example.test/tournaments", http=http, timeout=3)


def test_fetch_tournaments_connection_error(http):
    http.get.side_effect = requests.ConnectionError("no route")

    with pytest.raises(TournamentSourceError, match="no route"):
        fetch_tournaments("https://example.test/tournaments", http=http, timeout=3)
