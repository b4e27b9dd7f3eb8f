from __future__ import annotations
"""Command-line parsing into :class:`TransferOptions`."""
import argparse
from typing import Sequence

from .models import Direction, TransferOptions
from .paths import SCHEME, is_remote, parse_remote


class UsageError(ValueError):
    """Raised when the command line cannot be turned into a transfer."""


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="s3sync",
        description="Copy a local directory tree to an S3 prefix, or an S3 prefix to a local directory.",
        epilog=f"Exactly one of SOURCE and DEST must begin with {SCHEME}bucket.",
    )
    parser.add_argument("source", help="local file or folder, or s3://bucket/prefix to download")
    parser.add_argument("dest", help="destination folder, or s3://bucket/prefix to upload to")
    parser.add_argument("--profile", default="", help="AWS credentials profile to use")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="print what would be transferred without transferring anything",
    )
    parser.add_argument("--region", default=None, help="AWS region of the bucket")
    parser.add_argument("--endpoint-url", default=None, help="custom S3-compatible endpoint")
    parser.add_argument("--settings", default=None, help="path to a JSON settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def options_from_namespace(args: argparse.Namespace) -> TransferOptions:
    source_remote = is_remote(args.source)
    dest_remote = is_remote(args.dest)
    if source_remote == dest_remote:
        raise UsageError(f"either source or destination should begin with {SCHEME}")

    try:
        locator = parse_remote(args.dest if dest_remote else args.source)
    except ValueError as exc:
        raise UsageError(str(exc)) from exc

    if dest_remote:
        return TransferOptions(
            bucket_name=locator.bucket,
            source_path=args.source,
            dest_path=locator.key,
            direction=Direction.UPLOAD,
            dry_run=args.dry_run,
            profile=args.profile.strip(),
        )
    return TransferOptions(
        bucket_name=locator.bucket,
        source_path=locator.key,
        dest_path=args.dest,
        direction=Direction.DOWNLOAD,
        dry_run=args.dry_run,
        profile=args.profile.strip(),
    )


def resolve_options(argv: Sequence[str] | None = None) -> TransferOptions:
    """Parse *argv* and return validated options.

    Raises:
        UsageError: on missing, extra or ambiguous arguments.
    """

    return options_from_namespace(build_parser().parse_args(argv))
