#!/usr/bin/env python3
"""ConfCore content fetch & ledger sync CLI.

This module provides a command-line interface for fetching the conference
content endpoints through ConfCoreClient and, when a ledger is configured,
mirroring new sessions into it.

Architecture:
    - ConfCoreClient owns the per-endpoint caches and the RestClient
    - SessionSyncService is triggered by every successful content fetch
    - Results arrive through callbacks; the CLI turns them into awaitables

Environment Variables:
    - CONFCORE_BASE_URL: Content service base URL (default: production)
    - CONFCORE_LEDGER_URL: Session ledger rows endpoint (optional)
    - See src/confcore/config.py for the full list

Example Usage:
    $ python main.py                          # Fetch schedule/content (syncs if configured)
    $ python main.py --news --featured        # Fetch news and featured sections
    $ python main.py --all --wait-uploads     # Fetch everything, wait for ledger uploads
    $ python main.py --content --no-sync      # Fetch content without touching the ledger
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone

from src.confcore.api import ConfCoreClient, Endpoint, FetchResult, default_center
from src.confcore.api.exceptions import ConfigurationError
from src.confcore.config import Settings, load_settings
from src.confcore.sync import SessionSyncService

logger = logging.getLogger(__name__)


async def fetch_once(client: ConfCoreClient, endpoint: Endpoint) -> FetchResult:
    """Fetch ``endpoint`` and wait for the first delivered result."""
    future: asyncio.Future = asyncio.get_running_loop().create_future()

    def on_result(result: FetchResult) -> None:
        if not future.done():
            future.set_result(result)

    client.fetch(endpoint, on_result)
    return await future


def describe(value) -> str:
    """One-line summary of a decoded value."""
    if isinstance(value, list):
        return f"{len(value)} items"
    sessions = getattr(value, "sessions", None)
    if sessions is not None:
        return f"{len(sessions)} sessions"
    return type(value).__name__


def selected_endpoints(args: argparse.Namespace) -> list[Endpoint]:
    if args.all:
        return list(Endpoint)

    chosen = []
    if args.news:
        chosen.append(Endpoint.NEWS)
    if args.featured:
        chosen.append(Endpoint.FEATURED_SECTIONS)
    if args.content:
        chosen.append(Endpoint.SCHEDULE)
    if args.sessions:
        chosen.append(Endpoint.SESSIONS)
    if args.live:
        chosen.append(Endpoint.LIVE_VIDEO_ASSETS)
    return chosen or [Endpoint.SCHEDULE]


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Fetch the selected endpoints and report.

    Returns:
        Process exit code (1 if any fetch failed)
    """
    start_time = datetime.now(timezone.utc)
    print(f"[Main] Starting at {start_time.isoformat()}")
    print(f"[Main] Config: {settings}")

    failures = 0
    default_center.update(settings.environment)

    async with ConfCoreClient(
        expiration=settings.cache_ttl,
        timeout=settings.http_timeout,
    ) as client:
        sync = None
        if settings.sync_active and not args.no_sync:
            sync = SessionSyncService.for_ledger(
                client.http,
                settings.ledger_url,
                event_identifiers=settings.sync_events,
                upload_spacing=settings.upload_spacing,
            )
            client.sync = sync
        elif not args.no_sync:
            print("[Main] CONFCORE_LEDGER_URL not set, ledger sync disabled")

        endpoints = selected_endpoints(args)
        results = await asyncio.gather(*(fetch_once(client, e) for e in endpoints))

        print("\n" + "=" * 60)
        print("FETCH RESULTS")
        print("=" * 60)
        for endpoint, result in zip(endpoints, results):
            if result.ok:
                print(f"{endpoint.name:<20} OK     {describe(result.value)}")
            else:
                failures += 1
                print(f"{endpoint.name:<20} {result.error.kind.upper():<6} {result.error}")

        if sync is not None:
            if args.wait_uploads:
                print("\n[Main] Waiting for ledger uploads...")
                await sync.drain()
            else:
                await sync.drain_runs()

            if sync.last_result is not None:
                print(f"\nLEDGER SYNC: {sync.last_result.to_dict()}")
            await sync.close()

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    print(f"\n[Main] Completed in {duration:.1f} seconds")
    return 1 if failures else 0


def main():
    parser = argparse.ArgumentParser(
        description="Fetch conference content and mirror sessions into the ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          # Fetch schedule/content
  python main.py --news --featured        # Fetch news and featured sections
  python main.py --all --wait-uploads     # Fetch everything, wait for uploads
        """
    )

    # Endpoint selection
    endpoint_group = parser.add_argument_group("Endpoint Selection")
    endpoint_group.add_argument("--news", action="store_true", help="Fetch news items")
    endpoint_group.add_argument("--featured", action="store_true", help="Fetch featured sections")
    endpoint_group.add_argument(
        "--content",
        action="store_true",
        help="Fetch schedule/content (default if nothing selected)"
    )
    endpoint_group.add_argument("--sessions", action="store_true", help="Fetch session videos")
    endpoint_group.add_argument("--live", action="store_true", help="Fetch live video assets")
    endpoint_group.add_argument("--all", action="store_true", help="Fetch every endpoint")

    # Sync options
    sync_group = parser.add_argument_group("Ledger Sync")
    sync_group.add_argument(
        "--no-sync",
        action="store_true",
        help="Do not mirror sessions into the ledger"
    )
    sync_group.add_argument(
        "--wait-uploads",
        action="store_true",
        help="Wait for every staggered upload before exiting"
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"[Main] Configuration error: {e}")
        sys.exit(1)

    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
