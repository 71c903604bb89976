import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .models import WeekendBucket, WeekendQuote

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / 'templates'
CSV_COLUMNS = ['airport', 'weekend', 'price', 'friend', 'airline', 'depart', 'arrive', 'from_cache', 'tournaments']


def _row(wq: WeekendQuote) -> dict[str, str]:
    cheapest = wq.cheapest
    return {
        'airport': wq.bucket.key.airport.code,
        'weekend': wq.bucket.key.weekend_start.isoformat(),
        'price': f"${cheapest.price}" if cheapest else 'no-price',
        'friend': 'yes' if wq.is_friend_airport else 'no',
        'airline': cheapest.airline if cheapest else '',
        'depart': cheapest.outbound_departure_time if cheapest else '',
        'arrive': cheapest.outbound_arrival_time if cheapest else '',
        'from_cache': 'yes' if wq.provenance.from_cache else 'no',
        'tournaments': '; '.join(f"{t.name} ({t.city}, {t.region}, {t.raw_date_text})"
                                 for t in wq.bucket.tournaments),
    }


def _markdown_row(wq: WeekendQuote) -> dict[str, str]:
    # a bare pipe would end the table cell
    return {key: value.replace('|', '\\|') for key, value in _row(wq).items()}


def format_markdown(title: str, quotes: Iterable[WeekendQuote], generated_at: datetime | None = None) -> str:
    env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=select_autoescape(['html', 'xml']),
                      trim_blocks=True, lstrip_blocks=True)
    tpl = env.get_template('weekend_quotes.md.j2')
    generated = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M')
    return tpl.render(title=title, generated_at=generated, rows=[_markdown_row(wq) for wq in quotes])


def write_markdown(path: Path, title: str, quotes: Iterable[WeekendQuote]) -> Path:
    path.write_text(format_markdown(title, quotes), encoding='utf-8')
    return path


def write_csv(path: Path, quotes: Iterable[WeekendQuote]) -> Path:
    with open(path, 'wt', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for wq in quotes:
            writer.writerow(_row(wq))
    return path


def format_table(quotes: Iterable[WeekendQuote]) -> str:
    header = f"{'Airport':<7} | {'Weekend':<10} | {'Price':<9} | {'Friend':<6} | {'Airline':<12} | {'Depart':<16} | Tournaments"
    lines = [header]
    for wq in quotes:
        r = _row(wq)
        lines.append(f"{r['airport']:<7} | {r['weekend']:<10} | {r['price']:<9} | {r['friend']:<6} | "
                     f"{r['airline']:<12} | {r['depart']:<16} | {r['tournaments']}")
    return "\n".join(lines)


def format_bucket(bucket: WeekendBucket) -> str:
    lines = [f"{bucket.key.airport.code} - Weekend of {bucket.key.weekend_start.isoformat()}"]
    lines.extend(f"  - {t.name} | {t.city}, {t.region} | {t.raw_date_text}" for t in bucket.tournaments)
    return "\n".join(lines)
