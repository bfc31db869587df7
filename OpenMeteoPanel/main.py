"""Weather and air-quality panel backed by the Open-Meteo APIs."""
import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from dotenv import load_dotenv

from cache_store import CacheStore, FileKeyValueStore
from display_mappers import DEFAULT_LOCALE, MESSAGES
from fetch_cache import CachedFetcher
from http_transport import RequestsTransport
from page import Page
from panel_config import DEFAULT_LAT, DEFAULT_LON, PanelConfig
from scheduler import RefreshTrigger, Scheduler
from updater import WeatherUpdater

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CACHE_DIR = os.path.join(BASE_DIR, ".cache")
DEFAULT_OUTPUT = os.path.join(BASE_DIR, "panel.html")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Open-Meteo weather and air quality panel")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--cache-dir", default=None, help="Directory for cached responses")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="HTML fragment written after each update")
    parser.add_argument("--locale", choices=sorted(MESSAGES), default=None)
    parser.add_argument("--refresh", type=float, default=600.0, help="Seconds between refreshes")
    parser.add_argument("--cache-ttl", type=int, default=600)
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--once", action="store_true", help="Run a single update and exit")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def load_config(args: argparse.Namespace) -> PanelConfig:
    load_dotenv()
    lat = os.getenv("WEATHER_LAT", str(DEFAULT_LAT))
    lon = os.getenv("WEATHER_LON", str(DEFAULT_LON))
    locale = args.locale or os.getenv("WEATHER_LOCALE", DEFAULT_LOCALE)

    try:
        lat_val = float(lat)
        lon_val = float(lon)
    except ValueError as exc:
        raise SystemExit(f"Invalid coordinates: {exc}") from exc
    if args.refresh <= 0:
        raise SystemExit(f"Refresh interval must be positive, got {args.refresh}")
    if locale not in MESSAGES:
        raise SystemExit(f"Unsupported locale {locale!r}, expected one of {sorted(MESSAGES)}")

    config = PanelConfig(
        lat=lat_val,
        lon=lon_val,
        locale=locale,
        cache_ttl_seconds=args.cache_ttl,
        refresh_seconds=args.refresh,
        output_path=args.output or None,
    )
    logging.info("Configuration loaded: lat=%s lon=%s locale=%s", lat_val, lon_val, locale)
    return config


def build_updater(config: PanelConfig, cache_dir: str, timeout: int) -> WeatherUpdater:
    store = CacheStore(FileKeyValueStore(cache_dir))
    fetcher = CachedFetcher(
        transport=RequestsTransport(timeout=timeout),
        store=store,
        cache_ttl_seconds=config.cache_ttl_seconds,
    )
    logging.info("Weather updater ready (cache dir=%s, ttl=%ss)", cache_dir, config.cache_ttl_seconds)
    return WeatherUpdater(fetcher, Page(), config)


async def serve(updater: WeatherUpdater, config: PanelConfig) -> None:
    loop = asyncio.get_running_loop()
    trigger = RefreshTrigger()
    scheduler = Scheduler(updater, interval_seconds=config.refresh_seconds, trigger=trigger)
    stop = asyncio.Event()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)
    if hasattr(signal, "SIGUSR1"):
        loop.add_signal_handler(signal.SIGUSR1, trigger.fire)
        logging.info("Send SIGUSR1 to pid %s for a manual refresh", os.getpid())

    timer = asyncio.create_task(scheduler.run_forever())
    await stop.wait()
    logging.info("Stopping panel")
    timer.cancel()
    await scheduler.drain()


def main(argv=None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config(args)
    cache_dir = args.cache_dir or os.getenv("WEATHER_CACHE_DIR", DEFAULT_CACHE_DIR)
    updater = build_updater(config, cache_dir, args.timeout)

    if args.once:
        result = asyncio.run(updater.run())
        sys.stdout.write(updater.page.to_html())
        if not result.ok:
            logging.warning("Update used fallback content: %s", result.error)
        return

    asyncio.run(serve(updater, config))


if __name__ == "__main__":
    main()
