"""Polymarket wallet portfolio dashboard: command-line entry point."""

import argparse
import asyncio
import logging
import sys
import time

from tqdm import tqdm

import config
from analyzers.metrics import compute_metrics
from analyzers.timeline import build_timeline, details, facets, headline, icon, type_label
from analyzers.volume import daily_volume
from analyzers.winners_losers import winners_and_losers
from collectors.api_client import AsyncDataClient
from dashboard.address import InvalidAddressError
from dashboard.recent import RecentLookups
from dashboard.session import DashboardSession
from dashboard.view_model import DashboardView
from reporting.formatting import format_pct, format_rank, format_usd
from storage.models import ALL_FIELDS
from storage.state import UPDATED, SnapshotStore

FIELD_LABELS = {
    "positions": "Open positions",
    "closed_positions": "Closed positions",
    "trades": "Trade fills",
    "activity": "Activity events",
    "leaderboard": "Leaderboard",
    "quick_value": "Quick value",
}
RECENT_ACTIVITY_DAYS = 3


def _progress_listener(pbar):
    """Tick the progress bar and log each endpoint as it lands."""
    def listener(event):
        if event.kind != UPDATED:
            return
        value = getattr(event.snapshot, event.field)
        detail = f"{len(value):,}" if isinstance(value, tuple) else format_usd(value)
        pbar.write(f"  {FIELD_LABELS[event.field]:<17} {detail}")
        pbar.update(1)
    return listener


def print_summary(snapshot):
    """Print the headline metrics and movers for a loaded snapshot."""
    m = compute_metrics(snapshot)
    winners, losers = winners_and_losers(snapshot.positions, snapshot.closed_positions)
    daily = daily_volume(snapshot.trades)

    print("\n" + "=" * 60)
    print(f"PORTFOLIO SUMMARY: {snapshot.address}")
    print("=" * 60)
    print(f"  Rank:            {format_rank(m.rank)}")
    print(f"  Total value:     {format_usd(m.total_value)}")
    if m.quick_value is not None:
        print(f"  Quick value:     {format_usd(m.quick_value)}")
    print(f"  Unrealized P&L:  {format_usd(m.unrealized_pnl)}")
    print(f"  Realized P&L:    {format_usd(m.realized_pnl)}")
    print(f"  Return:          {format_pct(m.return_pct)}")
    print(f"  Win rate:        {m.win_rate * 100:.1f}%")
    print(f"  Positions:       {m.active_count:,} active, {m.closed_count:,} closed")
    if not daily.empty:
        print(f"  Trading days:    {len(daily):,} ({daily.index[0]} to {daily.index[-1]})")
        print(f"  Total volume:    {format_usd(daily['volume'].sum())}")
    activity = facets(snapshot.activity)
    if activity.types:
        counts = ", ".join(f"{type_label(t)} {n:,}" for t, n in activity.types)
        print(f"  Activity:        {counts}")
    print("=" * 60)

    if winners:
        print("\n  Top winners:")
        for winner in winners:
            print(f"    {format_usd(winner.pnl):>10}  {winner.title[:60]}")
    if losers:
        print("\n  Top losers:")
        for loser in losers:
            print(f"    {format_usd(loser.pnl):>10}  {loser.title[:60]}")

    groups = build_timeline(snapshot.activity)
    if groups:
        print("\n  Recent activity:")
        for day, events in groups[:RECENT_ACTIVITY_DAYS]:
            print(f"    {day}")
            for event in events:
                print(f"      {icon(event.type)} {headline(event)}")
                extra = details(event)
                if extra:
                    print(f"        {'  '.join(extra)}")


async def run(args) -> int:
    store = SnapshotStore()
    view = store.subscribe(DashboardView())
    recent = RecentLookups()

    async with AsyncDataClient() as client:
        session = DashboardSession(client, store=store, recent=recent)

        pbar = tqdm(total=len(ALL_FIELDS), desc="Fetching", unit=" endpoint")
        listener = store.subscribe(_progress_listener(pbar))
        start = time.time()
        try:
            snapshot = await session.submit(args.address)
        except InvalidAddressError as e:
            print(f"error: {e.message}", file=sys.stderr)
            return 2
        finally:
            store.unsubscribe(listener)
            pbar.close()

        if snapshot is None:
            print(f"\n{session.error or 'Lookup abandoned.'}", file=sys.stderr)
            return 1
        print(f"\nFetched in {time.time() - start:.1f}s "
              f"({client.request_count} requests, panels ready: {', '.join(view.ready)})")

    print_summary(snapshot)

    paths = session.export(args.output_dir,
                           report=not args.no_report,
                           spreadsheet=not args.no_xlsx)
    for alert in session.alerts:
        print(f"\nwarning: {alert}", file=sys.stderr)
    for kind, path in paths.items():
        print(f"\n  {kind.capitalize()} written to {path}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Polymarket wallet portfolio dashboard")
    parser.add_argument("address", nargs="?", help="Wallet address (0x optional)")
    parser.add_argument("--output-dir", default=config.OUTPUT_DIR, help="Where exports are written")
    parser.add_argument("--no-report", action="store_true", help="Skip the HTML report")
    parser.add_argument("--no-xlsx", action="store_true", help="Skip the spreadsheet export")
    parser.add_argument("--recent", action="store_true", help="List recently looked-up addresses")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.recent:
        for address in RecentLookups().load():
            print(address)
        return
    if not args.address:
        parser.error("an address is required unless --recent is given")

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
