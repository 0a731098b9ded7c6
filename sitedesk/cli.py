"""Command line interface for backups and content inspection.

Examples:
    sitedesk --env prod.env backup
    sitedesk list
    sitedesk download backup-2024-05-01T12-00-00-000Z.json -o latest.json
    sitedesk restore backup-2024-05-01T12-00-00-000Z.json
    sitedesk content show site_content en --flat
    sitedesk records list social_links
    sitedesk records add pages --data '{"title": "About", "slug": "about"}'
    sitedesk records move social_links 3 up
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .config import SiteDeskConfig
from .document import flatten_document
from .editor import coerce_key
from .errors import SiteDeskError
from .sitedesk import SiteDesk


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitedesk", description="Site content backup and inspection")
    parser.add_argument(
        "--env",
        help="Environment file to load (e.g., prod.env)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("backup", help="Back up all configured partitions")
    commands.add_parser("list", help="List backups, newest first")

    download = commands.add_parser("download", help="Download a backup archive")
    download.add_argument("name")
    download.add_argument("-o", "--output", help="Output file (default: the backup name)")

    restore = commands.add_parser("restore", help="Replace live partitions with a backup")
    restore.add_argument("name")
    restore.add_argument(
        "--yes",
        action="store_true",
        help="Skip the interactive confirmation",
    )

    content = commands.add_parser("content", help="Inspect editable content")
    content_commands = content.add_subparsers(dest="content_command", required=True)
    show = content_commands.add_parser("show", help="Print one record's document")
    show.add_argument("editor")
    show.add_argument("key")
    show.add_argument("--flat", action="store_true", help="Print dotted key/value pairs")

    records = commands.add_parser("records", help="Manage pages, projects, services and social links")
    records_commands = records.add_subparsers(dest="records_command", required=True)
    records_list = records_commands.add_parser("list", help="List a collection in display order")
    records_list.add_argument("collection")
    records_show = records_commands.add_parser("show", help="Print one record")
    records_show.add_argument("collection")
    records_show.add_argument("id")
    records_add = records_commands.add_parser("add", help="Add a record")
    records_add.add_argument("collection")
    records_add.add_argument("--data", default="{}", help="Field values as a JSON object")
    records_update = records_commands.add_parser("update", help="Change fields of a record")
    records_update.add_argument("collection")
    records_update.add_argument("id")
    records_update.add_argument("--data", required=True, help="Field values as a JSON object")
    records_delete = records_commands.add_parser("delete", help="Delete a record")
    records_delete.add_argument("collection")
    records_delete.add_argument("id")
    records_delete.add_argument("--yes", action="store_true", help="Skip the interactive confirmation")
    records_move = records_commands.add_parser("move", help="Move a record one place up or down")
    records_move.add_argument("collection")
    records_move.add_argument("id")
    records_move.add_argument("direction", choices=["up", "down"])

    return parser


async def _backup(sitedesk: SiteDesk, args) -> int:
    metadata = await sitedesk.backup_manager.create_backup()
    print(f"Created {metadata.name} ({metadata.size_bytes:,} bytes)")
    for name, count in metadata.statistics.items():
        print(f"  {name}: {count} records")
    return 0


async def _list(sitedesk: SiteDesk, args) -> int:
    backups = await sitedesk.backup_manager.list_backups()
    if not backups:
        print("No backups found.")
        return 0
    for backup in backups:
        print(f"{backup.name}\t{backup.created_at.isoformat()}\t{backup.size_bytes}")
    return 0


async def _download(sitedesk: SiteDesk, args) -> int:
    data = await sitedesk.backup_manager.download_backup(args.name)
    output = Path(args.output or args.name)
    output.write_bytes(data)
    print(f"Saved {args.name} to {output} ({len(data):,} bytes)")
    return 0


async def _restore(sitedesk: SiteDesk, args) -> int:
    manager = sitedesk.backup_manager
    confirmation = await manager.request_restore(args.name)
    print(confirmation.description)

    if not args.yes:
        answer = input("Type 'yes' to restore: ")
        if answer.strip().lower() != "yes":
            print("Restore cancelled.")
            return 1

    result = await manager.restore_backup(args.name, confirmation.token)
    print(f"Restored {', '.join(result.partitions) or 'nothing'} from {result.name}")
    return 0


async def _content_show(sitedesk: SiteDesk, args) -> int:
    session = sitedesk.editor(args.editor, coerce_key(args.key))
    document = await session.load()
    if args.flat and isinstance(document, dict):
        for key, value in flatten_document(document).items():
            print(f"{key}: {value}")
    else:
        print(json.dumps(document, indent=2, ensure_ascii=False, default=str))
    return 0


def _parse_values(data: str) -> Dict[str, Any]:
    try:
        values = json.loads(data)
    except json.JSONDecodeError as e:
        raise ValueError(f"--data is not valid JSON ({e})") from e
    if not isinstance(values, dict):
        raise ValueError("--data must be a JSON object")
    return values


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False, default=str))


async def _records(sitedesk: SiteDesk, args) -> int:
    collection = sitedesk.collection(args.collection)
    command = args.records_command

    if command == "list":
        records = await collection.list_records()
        if not records:
            print(f"No {args.collection} records.")
        for record in records:
            print(json.dumps(record, ensure_ascii=False, default=str))
    elif command == "show":
        _print_json(await collection.get(args.id))
    elif command == "add":
        record = await collection.insert(_parse_values(args.data))
        print(f"Added {record[collection.config.id_field]}")
    elif command == "update":
        _print_json(await collection.update(args.id, _parse_values(args.data)))
    elif command == "delete":
        record = await collection.get(args.id)
        if not args.yes:
            label = record.get("title") or record.get("name") or args.id
            answer = input(f"Delete {args.collection} record {label!r}? This cannot be undone. Type 'yes': ")
            if answer.strip().lower() != "yes":
                print("Delete cancelled.")
                return 1
        await collection.delete(args.id)
        print(f"Deleted {args.id}")
    elif command == "move":
        records = await collection.move(args.id, -1 if args.direction == "up" else 1)
        for record in records:
            print(record[collection.config.id_field])
    return 0


COMMANDS = {
    "backup": _backup,
    "list": _list,
    "download": _download,
    "restore": _restore,
    "content": _content_show,
    "records": _records,
}


async def _run(config: SiteDeskConfig, args) -> int:
    sitedesk = SiteDesk(config)
    try:
        return await COMMANDS[args.command](sitedesk, args)
    finally:
        await sitedesk.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``sitedesk`` command; returns the exit code."""
    args = build_parser().parse_args(argv)

    if args.env:
        load_dotenv(args.env, override=True)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s:%(name)s:%(message)s'
    )

    try:
        config = SiteDeskConfig.from_env()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(_run(config, args))
    except SiteDeskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"Error: {e.args[0] if e.args else e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
