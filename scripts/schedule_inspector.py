"""
Schedule Inspector CLI

Debug tool for timetable extraction and stored schedules.

Usage:
    # Dry-run extraction on a timetable text file (no database needed)
    python scripts/schedule_inspector.py extract --file timetable.txt

    # Same, as JSON
    python scripts/schedule_inspector.py extract --file timetable.txt --json

    # Show a user's stored schedule and pending reminders
    python scripts/schedule_inspector.py show --user-id 123456789

    # Export all stored documents
    python scripts/schedule_inspector.py export --output backups/schedules.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders import ScheduleStore, parse_due_at
from timetable import ExtractionConfig, duration_minutes, extract_schedule

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def extract_file(path: str, as_json: bool = False):
    """Run extraction on a local text file and print the result."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    entries = extract_schedule(text, ExtractionConfig.from_env())

    if as_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return

    logger.info(f"Found {len(entries)} class(es) in {path}\n")
    for entry in entries:
        length = duration_minutes(entry.time)
        length_str = f" [{length} min]" if length else ""
        logger.info(f"  {entry.day:<10} {entry.time:<22} {entry.subject}{length_str}")


async def show_user(store: ScheduleStore, user_id: int):
    """Print a user's schedule and pending reminders."""
    schedule = await store.get_schedule(user_id)
    reminders = await store.list_reminders(user_id)

    logger.info(f"User {user_id}: {len(schedule)} class(es), {len(reminders)} reminder(s)\n")
    for entry in schedule:
        logger.info(f"  {entry.day:<10} {entry.time:<22} {entry.subject}")
    if reminders:
        logger.info("\nReminders:")
    for record in reminders:
        if not isinstance(record, dict):
            logger.info(f"  [malformed] {record!r}")
            continue
        due = parse_due_at(record.get("dueAt"))
        due_str = due.strftime("%Y-%m-%d %H:%M:%S UTC") if due else f"[malformed] {record.get('dueAt')!r}"
        logger.info(f"  {due_str}  {record.get('text', '')}")


async def export_documents(conn: asyncpg.Connection, output_file: str):
    """Export every stored document to JSON."""
    rows = await conn.fetch("SELECT user_id, data, updated_at FROM user_schedules ORDER BY user_id")
    documents = [
        {
            "user_id": row["user_id"],
            "data": json.loads(row["data"]) if isinstance(row["data"], str) else row["data"],
            "updated_at": row["updated_at"].isoformat() if row["updated_at"] else None,
        }
        for row in rows
    ]

    output = Path(output_file)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(documents, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported {len(documents)} document(s) to {output_file}")


async def main_async(args):
    """Async main function."""
    db_url = os.environ.get("DATABASE_URL")
    if not db_url:
        logger.error("DATABASE_URL environment variable required")
        sys.exit(1)

    pool = await asyncpg.create_pool(db_url, min_size=1, max_size=1)

    try:
        if args.command == "show":
            await show_user(ScheduleStore(pool), args.user_id)
        elif args.command == "export":
            async with pool.acquire() as conn:
                await export_documents(conn, args.output)
    finally:
        await pool.close()


def main():
    parser = argparse.ArgumentParser(
        description="Schedule Inspector CLI - Debug timetable extraction and stored schedules"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser("extract", help="Extract a schedule from a text file")
    extract_parser.add_argument("--file", "-f", required=True, help="Timetable text file")
    extract_parser.add_argument("--json", action="store_true", help="Print JSON")

    show_parser = subparsers.add_parser("show", help="Show a user's stored schedule")
    show_parser.add_argument("--user-id", type=int, required=True, help="Discord user ID")

    export_parser = subparsers.add_parser("export", help="Export stored schedules to JSON")
    export_parser.add_argument("--output", "-o", required=True, help="Output file path")

    args = parser.parse_args()

    if args.command == "extract":
        extract_file(args.file, as_json=args.json)
        return

    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
