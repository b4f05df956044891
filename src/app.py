"""Application entry point for the geoscope explorer."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import date
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from rich.console import Console
from rich.table import Table

import settings
from adapters.formatting import (
    clip_text,
    format_relative_time,
    format_stats,
    format_timestamp,
    message_body,
    navigation_text,
    region_label,
    tier_text,
)
from adapters.json_source import DatasetLoadError, JsonDatasetSource
from core.aggregator import build_map_layers
from core.filters import EventFilter, FilterError, apply_filters, timeline_stats
from core.models import Dataset, Region
from core.resolver import LocationResolver
from core.spatial import navigation_target, region_details
from core.visibility import plan_visibility

NAME = "GEOSCOPE"
FONT = "tarty-1"
DETAILS_LIMIT = 20

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/geoscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def build_source() -> JsonDatasetSource:
    return JsonDatasetSource(
        messages_uri=settings.MESSAGES_URL,
        cache_uri=settings.CACHE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        cache_bust=settings.CACHE_BUST,
    )


def _load_dataset(console: Console) -> Dataset:
    try:
        return build_source().load()
    except DatasetLoadError as exc:
        LOGGER.error("Dataset load failed: %s", exc)
        console.print(f"[bold red]Error loading data:[/] {exc}")
        raise SystemExit(1) from exc


def _timeline(args: argparse.Namespace, console: Console) -> None:
    dataset = _load_dataset(console)
    event_filter = EventFilter(
        start_date=args.start,
        end_date=args.end,
        channel=args.channel,
        search_text=args.search or "",
    )
    try:
        messages = apply_filters(dataset.messages, event_filter, settings.SEARCH_CONFIG)
    except FilterError as exc:
        console.print(f"[bold red]{exc}[/]")
        raise SystemExit(2) from exc

    resolver = LocationResolver(dataset.location_cache)
    table = Table(title="Events", show_lines=False)
    table.add_column("date", width=16)
    table.add_column("channel", width=18)
    table.add_column("text")
    table.add_column("locations", width=24)
    for message in messages[: args.limit]:
        table.add_row(
            format_timestamp(message.date),
            message.channel,
            clip_text(message.text, 96),
            ", ".join(resolver.resolved_locations(message)),
        )
    console.print(table)
    console.print(format_stats(timeline_stats(messages)))


def _region(args: argparse.Namespace, console: Console) -> None:
    dataset = _load_dataset(console)
    resolver = LocationResolver(dataset.location_cache)
    layers = build_map_layers(dataset.messages, resolver, tiers=settings.TIER_CONFIG)
    regions = layers.aggregator.find_by_name(args.name)
    if not regions:
        console.print(f"No region named {args.name!r}.")
        return

    for region in regions:
        details = region_details(region, dataset.messages, resolver)
        console.rule(f"Region: {region.name}")
        console.print(region_label(region), tier_text(region.tier))
        console.print(f"Messages about this region: {details.direct_count}")
        console.print(f"Messages from areas within: {details.within_count}")
        console.print(f"Total messages: {details.total}")
        console.print(f"Channels: {', '.join(details.channels)}")
        console.print(navigation_text(navigation_target(region.bounds)))

        table = Table(show_header=True)
        table.add_column("type", width=12)
        table.add_column("age", width=8)
        table.add_column("channel", width=18)
        table.add_column("text")
        for message, is_direct in details.messages[:DETAILS_LIMIT]:
            table.add_row(
                "About Region" if is_direct else "Within Area",
                format_relative_time(message.date),
                message.channel,
                clip_text(message_body(message), 96),
            )
        console.print(table)
        if details.total > DETAILS_LIMIT:
            console.print(f"... and {details.total - DETAILS_LIMIT} more messages")


def _coverage(console: Console) -> None:
    dataset = _load_dataset(console)
    resolver = LocationResolver(dataset.location_cache)
    coverage = resolver.coverage(dataset.messages)
    console.print(f"Matched locations: {len(coverage.matched)}")
    console.print(f"Unresolved locations: {len(coverage.unresolved)}")
    console.print(f"Missing locations: {len(coverage.missing)}")
    for key in sorted(coverage.missing):
        similar = resolver.similar_keys(key)
        hint = f" (similar: {', '.join(similar)})" if similar else ""
        console.print(f"  - {key}{hint}")


def _plan(args: argparse.Namespace, console: Console) -> None:
    north, south, east, west = args.viewport
    viewport = Region(north=north, south=south, east=east, west=west)
    dataset = _load_dataset(console)
    resolver = LocationResolver(dataset.location_cache)
    layers = build_map_layers(dataset.messages, resolver, tiers=settings.TIER_CONFIG)
    names = {region.region_id: region.name for region in layers.regions}
    plans = plan_visibility(
        viewport,
        args.zoom,
        [(region.region_id, region.bounds) for region in layers.regions],
        settings.VISIBILITY_CONFIG,
    )

    table = Table(title=f"Visibility at zoom {args.zoom:g}")
    table.add_column("region")
    table.add_column("visible", width=8)
    table.add_column("layer", width=6)
    table.add_column("rank", width=5)
    table.add_column("rel. area", width=10)
    for plan in plans:
        table.add_row(
            names[plan.shape_id],
            "yes" if plan.visible else "no",
            plan.layer or "",
            "" if plan.rank is None else str(plan.rank),
            f"{plan.relative_area:.3f}",
        )
    console.print(table)


def _browse() -> None:
    from frontend.app import ExplorerApp

    ExplorerApp(source=build_source()).run()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="geoscope")
    subparsers = parser.add_subparsers(dest="command")

    timeline = subparsers.add_parser("timeline", help="List filtered events, newest first")
    timeline.add_argument("--search", help="Fuzzy search text")
    timeline.add_argument("--channel", help="Only show this channel")
    timeline.add_argument("--start", type=date.fromisoformat, help="First day (YYYY-MM-DD)")
    timeline.add_argument("--end", type=date.fromisoformat, help="Last day (YYYY-MM-DD)")
    timeline.add_argument("--limit", type=int, default=50)

    region = subparsers.add_parser("region", help="Show every message inside a named region")
    region.add_argument("name")

    subparsers.add_parser("coverage", help="Show how message locations match the cache")

    plan = subparsers.add_parser("plan", help="Show which regions a viewport would draw")
    plan.add_argument(
        "--viewport",
        type=float,
        nargs=4,
        metavar=("NORTH", "SOUTH", "EAST", "WEST"),
        required=True,
    )
    plan.add_argument("--zoom", type=float, required=True)

    subparsers.add_parser("browse", help="Launch the terminal browser")

    args = parser.parse_args(argv)
    _print_banner()
    _configure_logging()

    if args.command == "browse":
        _browse()
        return

    console = Console()
    if args.command == "region":
        _region(args, console)
    elif args.command == "coverage":
        _coverage(console)
    elif args.command == "plan":
        _plan(args, console)
    else:
        if args.command is None:
            args = parser.parse_args(["timeline"])
        _timeline(args, console)


if __name__ == "__main__":
    main()
