"""Command-line access to the remote storage service.

Usage: python scripts/storage_cli.py --bucket reports write a.txt "hello"
Connection settings come from HTTPFS_URL / HTTPFS_USERNAME / HTTPFS_PASSWORD.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List

from httpfs.config import get_settings
from httpfs.storage import FilesystemError, HttpAdapter

LOGGER = logging.getLogger(__name__)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Operate on files in the remote storage service")
    parser.add_argument("--bucket", help="Bucket to operate on (default: HTTPFS_BUCKET or 'public')")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every HTTP request")
    commands = parser.add_subparsers(dest="command", required=True)

    for name in ("exists", "dir-exists", "read", "delete", "mkdir", "rmdir", "meta"):
        commands.add_parser(name).add_argument("path")

    write = commands.add_parser("write")
    write.add_argument("path")
    source = write.add_mutually_exclusive_group(required=True)
    source.add_argument("contents", nargs="?")
    source.add_argument("--from-file", type=Path, help="Upload the contents of a local UTF-8 file")

    for name in ("copy", "move"):
        transfer = commands.add_parser(name)
        transfer.add_argument("source")
        transfer.add_argument("destination")

    return parser.parse_args(argv)


def run(adapter: HttpAdapter, args: argparse.Namespace) -> None:
    command = args.command
    if command == "exists":
        print("true" if adapter.file_exists(args.path) else "false")
    elif command == "dir-exists":
        print("true" if adapter.directory_exists(args.path) else "false")
    elif command == "read":
        sys.stdout.buffer.write(adapter.read(args.path))
    elif command == "write":
        contents = args.from_file.read_text(encoding="utf-8") if args.from_file else args.contents
        adapter.write(args.path, contents)
        LOGGER.info("Wrote %s", args.path)
    elif command == "delete":
        adapter.delete(args.path)
        LOGGER.info("Deleted %s", args.path)
    elif command == "mkdir":
        adapter.create_directory(args.path)
    elif command == "rmdir":
        adapter.delete_directory(args.path)
    elif command == "meta":
        print("size:", adapter.file_size(args.path).file_size)
        print("mime_type:", adapter.mime_type(args.path).mime_type)
        print("visibility:", adapter.visibility(args.path).visibility)
        print("last_modified:", adapter.last_modified(args.path).last_modified)
    elif command == "copy":
        adapter.copy(args.source, args.destination)
    elif command == "move":
        adapter.move(args.source, args.destination)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    settings = get_settings()
    if args.bucket:
        settings = dataclasses.replace(settings, bucket=args.bucket)

    with HttpAdapter(settings) as adapter:
        try:
            run(adapter, args)
        except FilesystemError as exc:
            print(str(exc), file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
