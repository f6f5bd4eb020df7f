"""
CLI demo for the document store.

Usage:
    python -m docstore.cli seed
    python -m docstore.cli --directory data/ list
    python -m docstore.cli get 000-123
    python -m docstore.cli put '{"name": "Topi"}'
    python -m docstore.cli remove 000-123 7f3c...
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from docstore.config import get_store_config, setup_logging
from docstore.document_store import DocumentStore
from docstore.errors import StoreError

SAMPLE_RECORDS = [
    {"name": "Topi Vop"},
    {"id": "000-123", "name": "Mr. Topi"},
]


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def build_parser() -> argparse.ArgumentParser:
    config = get_store_config()

    parser = argparse.ArgumentParser(description="Store JSON records as files in a directory")
    parser.add_argument(
        "--directory",
        default=config["directory"],
        help=f"Directory holding the records (default: {config['directory']})",
    )
    parser.add_argument(
        "--log-file",
        default=config["log_file"],
        help="Write store logs to this file",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("seed", help="Store the sample records and print every record")
    commands.add_parser("list", help="Print the record file names")

    get_cmd = commands.add_parser("get", help="Print one record")
    get_cmd.add_argument("id")

    put_cmd = commands.add_parser("put", help="Store a record given as a JSON object")
    put_cmd.add_argument("record", help='JSON object, e.g. \'{"name": "Topi"}\'')

    remove_cmd = commands.add_parser("remove", help="Delete one or more records")
    remove_cmd.add_argument("ids", nargs="+")

    return parser


async def run(args: argparse.Namespace) -> None:
    """Execute one parsed command against the store."""
    if args.command == "seed":
        Path(args.directory).mkdir(parents=True, exist_ok=True)

    store = DocumentStore(args.directory)

    if args.command == "seed":
        await store.put_bulk(SAMPLE_RECORDS)
        print_json(await store.get_bulk())
    elif args.command == "list":
        print_json(store.list_ids())
    elif args.command == "get":
        print_json(await store.get(args.id))
    elif args.command == "put":
        try:
            record = json.loads(args.record)
        except json.JSONDecodeError as e:
            raise ValueError(f"Record is not valid JSON: {e}") from e
        print_json(await store.put(record))
    elif args.command == "remove":
        await store.remove_bulk(args.ids)
        print_json(store.list_ids())


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the command and return the exit status."""
    args = build_parser().parse_args(argv)
    if args.log_file:
        setup_logging(log_file=args.log_file)

    try:
        asyncio.run(run(args))
    except StoreError as e:
        print(f"❌ {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
