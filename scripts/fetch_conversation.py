#!/usr/bin/env python3
"""
Fetch one Intercom conversation and show which admins replied when.

Useful for checking by hand why a conversation did or did not count as
participation for an admin.

Usage:
    python scripts/fetch_conversation.py 215471234567890
    python scripts/fetch_conversation.py 215471234567890 --admin-id 8742044 --date 2025-11-10
    python scripts/fetch_conversation.py 215471234567890 --raw
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from src.intercom_client import IntercomAPIError, IntercomClient
from src.logging_utils import configure_safe_logging
from src.participation import WindowError, evaluate_participation, normalize_parts, resolve_window
from src.utils.normalize import normalize_timestamp, to_iso


def main():
    parser = argparse.ArgumentParser(description="Fetch a conversation and list its parts")
    parser.add_argument("conversation_id", help="Intercom conversation id")
    parser.add_argument("--admin-id", help="Evaluate participation for this admin")
    parser.add_argument("--date", help="UTC day for --admin-id, YYYY-MM-DD (default: today)")
    parser.add_argument("--raw", action="store_true", help="Dump the raw conversation JSON")
    args = parser.parse_args()

    configure_safe_logging()

    try:
        client = IntercomClient()
        conversation = client.get_conversation(args.conversation_id)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    except IntercomAPIError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if args.raw:
        print(json.dumps(conversation, indent=2))
        return

    parts = normalize_parts(conversation)
    print(f"Conversation {conversation.get('id')} ({conversation.get('state', 'unknown')})")
    print(f"  created: {to_iso(normalize_timestamp(conversation.get('created_at')))}")
    print(f"  updated: {to_iso(normalize_timestamp(conversation.get('updated_at')))}")
    print(f"  parts:   {len(parts)}")
    print()
    for part in parts:
        who = f"{part.author_type or '?'}:{part.author_id or '?'}"
        print(f"  {to_iso(part.created_at) or 'no timestamp':<22} {part.part_type or '':<12} {who}")

    if args.admin_id:
        try:
            window, label = resolve_window(args.admin_id, updated_date=args.date)
        except WindowError as e:
            print(f"ERROR: {e}")
            sys.exit(2)
        result = evaluate_participation(conversation, window.admin_id, window.since, window.before)
        print()
        print(
            f"Admin {window.admin_id} on {label}: "
            f"{'participated' if result.matched else 'no participation'} "
            f"({result.part_count} part(s))"
        )


if __name__ == "__main__":
    main()
