"""High-level orchestration for pricing tournament weekends and producing reports.

Usage patterns:

1. Price every weekend bucket in the configured window (cache reused where fresh):
   run_pipeline(api_keys=[...])

2. Re-price one destination/date regardless of cache age:
   run_pipeline(api_keys=[...], destination="AUS", departure_date=date(2025, 1, 10), skip_cache=True)
"""
import argparse
import logging
import time
from datetime import date
from pathlib import Path
from typing import Any, Sequence

import schedule
from tqdm import tqdm

from tourneyflights.config import settings
from tourneyflights.flights.account import format_key_usage
from tourneyflights.logging_config import setup_logging
from tourneyflights.models import QuoteQuery, SearchComplete, SearchFailed, SearchFilters, SearchProgress
from tourneyflights.report import format_bucket, format_table, write_csv, write_markdown
from tourneyflights.sessions.manager import SessionManager
from tourneyflights.sessions.search import SearchOrchestrator
from tourneyflights.sessions.store import SessionStore


def build_manager() -> SessionManager:
    store = SessionStore(ttl_seconds=settings.session_ttl_seconds)
    return SessionManager(store, SearchOrchestrator(store))


def _run_search(manager: SessionManager, session_id: str, filters: SearchFilters) -> None:
    with tqdm(desc="Pricing weekends", unit="route") as bar:
        for event in manager.stream_search(session_id, filters):
            if isinstance(event, SearchProgress):
                bar.total = event.total
                price = f"${event.price}" if event.price is not None else "no price"
                bar.set_postfix_str(f"{event.destination} {event.departure_date} {price}"
                                    f"{' (cached)' if event.from_cache else ''}")
                bar.update(1)
            elif isinstance(event, SearchComplete):
                logging.info(f"Search finished: {len(event.response.results)} routes, "
                             f"{event.response.total_quotes} quotes")
            elif isinstance(event, SearchFailed):
                raise RuntimeError(f"Search failed: {event.error}")


def run_pipeline(
        api_keys: Sequence[str],
        config: dict[str, Any] | None = None,
        destination: str | None = None,
        departure_date: date | None = None,
        max_results: int | None = None,
        skip_cache: bool = False,
        filtered: bool = False,
        show_key_usage: bool = False,
        output_md: Path | None = None,
        output_csv: Path | None = None,
        manager: SessionManager | None = None,
) -> Path:
    manager = manager or build_manager()
    info = manager.create_session(api_keys, config)
    session_id = info.session_id
    logging.info(f"Session ready: {info.total_tournaments} tournaments, {info.total_buckets} weekend buckets")
    try:
        for bucket in manager.buckets(session_id, in_window=True):
            logging.debug("\n%s", format_bucket(bucket))
        if show_key_usage:
            logging.info("\n%s", format_key_usage(manager.key_usage(session_id)))

        filters = SearchFilters(
            destination_airport=destination,
            departure_date=departure_date,
            max_results=max_results,
            skip_cache=skip_cache,
        )
        _run_search(manager, session_id, filters)

        quotes = manager.quotes(session_id, QuoteQuery(filtered=filtered))
        print(format_table(quotes))

        md_path = write_markdown(output_md or settings.output_md, "Tournament weekend flights", quotes)
        logging.info(f"Markdown report written to {md_path}")
        if output_csv is not None:
            logging.info(f"CSV report written to {write_csv(output_csv, quotes)}")
        return md_path
    finally:
        manager.end_session(session_id)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Flight prices for table tennis tournament weekends")
    p.add_argument("--api-key", dest="api_keys", action="append",
                   help="SerpAPI key; repeat for rotation (default: SERPAPI_KEYS)")
    p.add_argument("--origin", default=settings.origin_airport, help="Origin airport IATA code")
    p.add_argument("--friends", nargs="*", default=list(settings.friend_airports),
                   help="Friend airports with the higher price limit")
    p.add_argument("--months", type=int, default=settings.filter_months, help="Months ahead to search")
    p.add_argument("--lookback-months", type=int, default=settings.lookback_months)
    p.add_argument("--trip-days", type=int, default=settings.trip_days, help="Days between departure and return")
    p.add_argument("--max-results", type=int, default=None,
                   help=f"Cap on lookups (default: {settings.max_api_calls_per_run})")
    # Single route
    p.add_argument("--destination", help="Only this destination airport")
    p.add_argument("--date", type=date.fromisoformat, help="Departure date YYYY-MM-DD")
    p.add_argument("--skip-cache", action="store_true", help="Ignore cached responses and call the provider")
    # Output
    p.add_argument("--filtered", action="store_true", help="Apply base/friend price limits to the report")
    p.add_argument("--output", type=Path, default=settings.output_md, help="Markdown report path")
    p.add_argument("--csv", type=Path, default=settings.output_csv, help="Also write a CSV report")
    p.add_argument("--key-usage", action="store_true", help="Log plan usage for every API key")
    p.add_argument("--log-level", default="INFO")
    p.add_argument("--log-file", type=Path, default=None)
    p.add_argument(
        "--schedule-at",
        metavar="HH:MM",
        default=None,
        help="Run the pipeline every day at the given time (e.g. 07:30). "
             "Without this flag the pipeline runs once and exits.",
    )
    return p


def main_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)

    api_keys = args.api_keys or list(settings.api_keys)
    if not api_keys:
        logging.error("No SerpAPI keys given: pass --api-key or set SERPAPI_KEYS")
        return 1

    pipeline_kwargs = dict(
        api_keys=api_keys,
        config=dict(
            origin_airport=args.origin,
            friend_airports=list(args.friends),
            filter_months=args.months,
            lookback_months=args.lookback_months,
            trip_days=args.trip_days,
        ),
        destination=args.destination,
        departure_date=args.date,
        max_results=args.max_results,
        skip_cache=args.skip_cache,
        filtered=args.filtered,
        show_key_usage=args.key_usage,
        output_md=args.output,
        output_csv=args.csv,
    )

    def _run() -> None:
        try:
            run_pipeline(**pipeline_kwargs)
        except Exception:  # noqa: BLE001
            logging.exception("Pipeline failed")

    if args.schedule_at:
        logging.info(f"Scheduler started, pipeline will run every day at {args.schedule_at}")
        _run()
        schedule.every().day.at(args.schedule_at).do(_run)
        while True:
            try:
                schedule.run_pending()
            except Exception:  # noqa: BLE001
                logging.exception("Scheduler error:")
                time.sleep(60 * 60)
            time.sleep(1)
    else:
        try:
            run_pipeline(**pipeline_kwargs)
        except Exception:  # noqa: BLE001
            logging.exception("Pipeline failed")
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main_cli())
