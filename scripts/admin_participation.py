#!/usr/bin/env python3
"""List conversations an admin actually replied in for one day.

Runs the same search + verify pipeline as GET /api/intercom-proxy without the
API server, following next_cursor until Intercom has no more pages.

Usage:
    python scripts/admin_participation.py --admin-id 8742044 --date 2025-11-10
    python scripts/admin_participation.py --admin-id 8742044 --since 1762740000 --before 1762826399
    python scripts/admin_participation.py --admin-id 8742044 --date 2025-11-10 --max-pages 1 --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = str(Path(__file__).parent.parent)
sys.path.insert(0, project_root)

from dotenv import load_dotenv

load_dotenv(Path(project_root) / ".env")

from src.intercom_client import IntercomAPIError, IntercomClient
from src.logging_utils import configure_safe_logging
from src.participation import ParticipationOrchestrator, WindowError, resolve_window

logger = logging.getLogger("admin_participation")


async def collect(orchestrator: ParticipationOrchestrator, window, label: str, max_pages: int) -> dict:
    """Follow cursors until done or max_pages, merging each page's matches."""
    conversations = []
    totals = {"participation_count": 0, "processed_count": 0, "error_count": 0}
    cursor = None
    pages = 0
    timed_out = False

    while pages < max_pages:
        pages += 1
        response = await orchestrator.run(window, cursor=cursor, date_label=label)
        conversations.extend(response.conversations)
        totals["participation_count"] += response.participation_count
        totals["processed_count"] += response.processed_count
        totals["error_count"] += response.error_count
        timed_out = timed_out or response.timed_out

        print(
            f"  page {pages}: {response.total_count} matched, "
            f"{response.processed_count} checked, {response.error_count} errors"
            + (" (time budget hit)" if response.timed_out else "")
        )

        cursor = response.next_cursor
        if not response.has_more or not cursor:
            break

    return {
        "admin_id": window.admin_id,
        "date": label,
        "pages": pages,
        "timed_out": timed_out,
        "conversations": conversations,
        **totals,
    }


def main():
    parser = argparse.ArgumentParser(description="List conversations an admin participated in")
    parser.add_argument("--admin-id", required=True, help="Intercom admin (teammate) id")
    parser.add_argument("--date", help="UTC day, YYYY-MM-DD (default: today)")
    parser.add_argument("--since", help="Window start: epoch seconds/ms or datetime")
    parser.add_argument("--before", help="Window end: epoch seconds/ms or datetime")
    parser.add_argument(
        "--max-pages", type=int, default=10,
        help="Stop after this many search pages (default: 10)",
    )
    parser.add_argument("--json", action="store_true", help="Print the merged result as JSON")
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    configure_safe_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        window, label = resolve_window(
            args.admin_id,
            updated_date=args.date,
            updated_since=args.since,
            updated_before=args.before,
        )
    except WindowError as e:
        print(f"ERROR: {e}")
        sys.exit(2)

    try:
        client = IntercomClient()
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print("=" * 60)
    print(f"Admin {window.admin_id} participation on {label}")
    print(f"Window: {window.since} - {window.before}")
    print("=" * 60)

    orchestrator = ParticipationOrchestrator(client)
    try:
        result = asyncio.run(collect(orchestrator, window, label, max(1, args.max_pages)))
    except IntercomAPIError as e:
        print(f"ERROR: Intercom search failed: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result, indent=2, default=str))
        return

    print()
    print(f"Conversations with participation: {len(result['conversations'])}")
    print(f"Participation parts:              {result['participation_count']}")
    print(f"Checked / errors:                 {result['processed_count']} / {result['error_count']}")
    for conv in result["conversations"]:
        print(f"  {conv['id']:>16}  {conv['participation_part_count']:>3} part(s)  {conv.get('updated_at_iso')}")


if __name__ == "__main__":
    main()
