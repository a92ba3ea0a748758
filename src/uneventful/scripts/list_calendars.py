#!/usr/bin/env python3
"""
List a Google account's calendars and how many events each has coming up.

Reads the account's refresh token from GOOGLE_REFRESH_TOKEN.

Usage:
    uv run python src/uneventful/scripts/list_calendars.py [--days 14]
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from uneventful.core.config import DEFAULT_TIMEZONE, EVENTS_PAGE_LIMIT
from uneventful.core.errors import CalendarError
from uneventful.core.http_client import close_http_client
from uneventful.core.oauth import GoogleOAuth
from uneventful.core.tokens import TokenStore
from uneventful.models.events import TimeWindow
from uneventful.services.aggregator import CalendarAggregator
from uneventful.services.calendar import CalendarService
from uneventful.services.workspace import sort_calendars


async def main(days: int):
    """List calendars and upcoming event counts."""
    refresh_token = os.environ.get("GOOGLE_REFRESH_TOKEN", "")
    if not refresh_token:
        print("GOOGLE_REFRESH_TOKEN is not set")
        sys.exit(1)

    oauth = GoogleOAuth()
    tokens = TokenStore(oauth)
    service = CalendarService(tokens)

    try:
        tokens.authenticate(await oauth.refresh(refresh_token))

        print("Fetching calendars from Google...\n")
        calendars = sort_calendars(await service.list_calendars())
        print(f"Found {len(calendars)} calendars\n")
        print("=" * 80)

        window = TimeWindow.starting_today(days, ZoneInfo(DEFAULT_TIMEZONE))
        aggregate = await CalendarAggregator(service).build(calendars, window)
        counts = aggregate.counts_by_calendar()

        for calendar in calendars:
            marker = " (primary)" if calendar.primary else ""
            print(f"\nCalendar: {calendar.display_name}{marker}")
            print(f"  ID: {calendar.id}")
            if calendar.background_color:
                print(f"  Color: {calendar.background_color}")
            count = counts.get(calendar.id, 0)
            more = "+" if calendar.id in aggregate.truncated else ""
            print(f"  Events in next {days} days: {count}{more}")
            print("-" * 80)

        if aggregate.truncated:
            print(f"\n+ more than {EVENTS_PAGE_LIMIT} events, list truncated")
        print("\nDone!")

    except CalendarError as e:
        print(f"\nError: {e}")
        sys.exit(1)
    finally:
        await close_http_client()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="List Google calendars and upcoming event counts")
    parser.add_argument("--days", type=int, default=14, help="Days ahead to count events")
    args = parser.parse_args()
    asyncio.run(main(args.days))
