#!/usr/bin/env python3
"""Command-line interface for eventscout.

Commands:
  - eventscout search       : Search events (filters + paging)
  - eventscout event        : Show one event (optionally its calendar link)
  - eventscout categories   : List provider segments and genres
  - eventscout recommend    : Recommend events for the stored preferences
  - eventscout favorites    : List / add / remove / toggle saved events
  - eventscout preferences  : Show or update stored preferences
  - eventscout geocode      : Look up a place, optionally saving it
  - eventscout reverse      : Resolve coordinates to a city and mark it current

Typical usage:
  eventscout search --location Chicago --date this-week --price free
  eventscout preferences --categories KZFzniwnSyZfZ7v7nJ --locations Chicago
  eventscout recommend --limit 5
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from eventscout.calendar import create_google_calendar_url
from eventscout.configs import Config
from eventscout.ingestion.adapters import TicketmasterAdapter
from eventscout.ingestion.errors import SourceError
from eventscout.ingestion.geocoding import GeocodingClient
from eventscout.ingestion.normalization import map_to_event
from eventscout.ingestion.pipeline import EventSearchPipeline, SearchRequest
from eventscout.monitoring import LoggingOptions, setup_logging, with_context
from eventscout.recommendation import RecommendationEngine
from eventscout.schemas.event import DateFilter, EventFilters, LocationDetail, PriceFilter
from eventscout.schemas.taxonomy import get_category_display_name
from eventscout.storage import (
    FavoritesStore,
    JsonFileStore,
    LocationStore,
    PreferenceStore,
    SessionStore,
    update_user_locations,
)

logger = logging.getLogger("eventscout.cli")


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _key_value(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {value!r}")
    return key, val


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="eventscout", description="Event discovery CLI")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--store", default=None, help="Path to the JSON key-value store")
    p.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    p.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    sub = p.add_subparsers(dest="cmd")

    # search
    ps = sub.add_parser("search", help="Search events")
    ps.add_argument("--search", "-s", default=None, help="Free-text keyword")
    ps.add_argument("--category", default=None, help="Category name (e.g. Music)")
    ps.add_argument("--date", choices=[d.value for d in DateFilter], default=None)
    ps.add_argument("--location", "-l", default=None, help="City")
    ps.add_argument("--price", choices=[p.value for p in PriceFilter], default=None)
    ps.add_argument("--include-past", action="store_true", help="Keep past events")
    ps.add_argument("--size", type=int, default=None, help="Page size")
    ps.add_argument("--page", type=int, default=0, help="Page number")
    ps.add_argument(
        "--param",
        type=_key_value,
        action="append",
        default=[],
        help="Extra provider parameter KEY=VALUE (repeatable)",
    )

    # event
    pe = sub.add_parser("event", help="Show one event")
    pe.add_argument("event_id", help="Provider event id")
    pe.add_argument("--calendar", action="store_true", help="Print a Google Calendar link")

    # categories
    sub.add_parser("categories", help="List provider segments and genres")

    # recommend
    pr = sub.add_parser("recommend", help="Recommend events")
    pr.add_argument("--limit", type=int, default=None, help="Max events")
    pr.add_argument(
        "--client",
        action="store_true",
        help="Score one fetched page locally instead of tiered provider queries",
    )
    pr.add_argument("--include-history", action="store_true", help="Keep saved events")

    # favorites
    pf = sub.add_parser("favorites", help="Manage saved events")
    pf.add_argument("action", choices=["list", "add", "remove", "toggle"])
    pf.add_argument("event_id", nargs="?", default=None)

    # preferences
    pp = sub.add_parser("preferences", help="Show or update preferences")
    pp.add_argument("--categories", type=_csv, default=None, help="Comma-separated category ids")
    pp.add_argument("--locations", type=_csv, default=None, help="Comma-separated cities")
    pp.add_argument("--max-price", type=float, default=None)

    # geocode
    pg = sub.add_parser("geocode", help="Look up a place")
    pg.add_argument("query", help="Place name")
    pg.add_argument("--save", action="store_true", help="Add the first match to locations")

    # reverse
    prv = sub.add_parser("reverse", help="Resolve coordinates and mark them current")
    prv.add_argument("latitude", type=float)
    prv.add_argument("longitude", type=float)

    return p.parse_args(argv)


def _dump(data: Any) -> None:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    elif isinstance(data, list):
        data = [d.model_dump(by_alias=True) if isinstance(d, BaseModel) else d for d in data]
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _setup_logging(args: argparse.Namespace) -> None:
    settings = Config.get_section("logging")
    setup_logging(
        LoggingOptions(
            level=args.log_level or settings.get("level", "INFO"),
            json_logs=args.json_logs or bool(settings.get("json_logs", False)),
        )
    )


def main(argv: list[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    try:
        return _main_impl(argv)
    except SourceError as e:
        logger.error(f"Provider error: {e!r}")
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


def _main_impl(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.version:
        from eventscout import __version__

        print(f"eventscout version {__version__}")
        return 0

    if not args.cmd:
        print("Error: Command required. Use --help for usage info.", file=sys.stderr)
        return 1

    _setup_logging(args)
    log = with_context(logger, command=args.cmd)

    store = JsonFileStore(Path(args.store) if args.store else Config.get_store_path())
    preferences = PreferenceStore(store)
    favorites = FavoritesStore(store)
    locations = LocationStore(store)
    session = SessionStore(store)

    if args.cmd == "favorites":
        if args.action == "list":
            _dump(favorites.get_saved_event_ids())
            return 0
        if not args.event_id:
            print("Error: event_id required for this action", file=sys.stderr)
            return 1
        if args.action == "add":
            _dump(favorites.add(args.event_id))
        elif args.action == "remove":
            _dump(favorites.remove(args.event_id))
        else:
            ids, saved = favorites.toggle(args.event_id)
            _dump({"savedEvents": ids, "isFavorite": saved})
        return 0

    if args.cmd == "preferences":
        current = preferences.get_preferences()
        if args.categories is not None:
            current = preferences.set_categories(args.categories)
        if args.max_price is not None:
            current = preferences.set_max_price(args.max_price)
        if args.locations is not None:
            existing = {d.city.lower(): d for d in locations.get_location_details()}
            details = [
                existing.get(city.lower()) or LocationDetail(city=city) for city in args.locations
            ]
            current = update_user_locations(details, preferences, locations, session)
        if current is None:
            print("No preferences stored.", file=sys.stderr)
            return 1
        _dump(current)
        return 0

    if args.cmd in ("geocode", "reverse"):
        with GeocodingClient.from_config() as geo:
            if args.cmd == "geocode":
                results = geo.forward_geocode(args.query)
                if args.save and results:
                    details = locations.get_location_details()
                    details.append(results[0].to_location_detail())
                    update_user_locations(details, preferences, locations, session)
                _dump([asdict(r) for r in results])
                return 0

            city = geo.reverse_geocode(args.latitude, args.longitude)
            if not city:
                print("Error: Couldn't determine your city.", file=sys.stderr)
                return 1
            details = locations.mark_current_location(city, args.latitude, args.longitude)
            update_user_locations(details, preferences, locations, session)
            _dump({"city": city})
            return 0

    with TicketmasterAdapter.from_config() as adapter:
        if args.cmd == "categories":
            summaries = adapter.fetch_categories()
            _dump([
                {
                    "id": s.segment.id,
                    "name": s.segment.name or get_category_display_name(s.segment.id),
                    "genres": [g.model_dump() for g in s.genres],
                }
                for s in summaries
            ])
            return 0

        if args.cmd == "event":
            event = map_to_event(adapter.fetch_event_by_id(args.event_id))
            if args.calendar:
                print(create_google_calendar_url(event))
            else:
                _dump(event)
            return 0

        pipeline = EventSearchPipeline(adapter)

        if args.cmd == "search":
            request = SearchRequest(
                filters=EventFilters(
                    search=args.search,
                    category=args.category,
                    date=args.date,
                    location=args.location,
                    price=args.price,
                ),
                include_past=args.include_past,
                size=args.size,
                page=args.page,
                params=dict(args.param),
            )
            result = pipeline.search(request)
            log.info(f"{result.count} events on this page, {result.total} total")
            _dump({
                "events": [e.model_dump(by_alias=True) for e in result.events],
                "count": result.count,
                "total": result.total,
                "page": result.page.model_dump(by_alias=True),
            })
            return 0

        if args.cmd == "recommend":
            engine = RecommendationEngine(
                pipeline=pipeline,
                preference_store=preferences,
                favorites_store=favorites,
                location_store=locations,
                session_store=session,
            )
            pool = pipeline.search(SearchRequest()).events if args.client else None
            rec = engine.recommend(
                limit=args.limit, pool=pool, include_history=args.include_history
            )
            log.info(f"strategy={rec.strategy} count={rec.count}")
            _dump({
                "strategy": rec.strategy,
                "events": [e.model_dump(by_alias=True) for e in rec.events],
            })
            return 0

    print(f"Error: Unknown command {args.cmd}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
