from __future__ import annotations
"""Command-line entry point wiring options, client and engine together."""
import logging
import sys
from typing import Callable, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from .models import TransferSummary
from .options import UsageError, build_parser, options_from_namespace
from .services import S3BucketService
from .settings import SettingsStorage, resolve_client_config
from .transfer import TransferEngine

LOGGER = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Send progress lines to stdout and warnings or errors to stderr."""

    formatter = logging.Formatter("%(message)s")
    progress = logging.StreamHandler(sys.stdout)
    progress.setFormatter(formatter)
    progress.addFilter(lambda record: record.levelno < logging.WARNING)
    failures = logging.StreamHandler(sys.stderr)
    failures.setFormatter(formatter)
    failures.setLevel(logging.WARNING)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(progress)
    root.addHandler(failures)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not verbose:
        # boto's own INFO chatter would interleave with the transfer log
        logging.getLogger("botocore").setLevel(logging.WARNING)
        logging.getLogger("boto3").setLevel(logging.WARNING)


def describe(summary: TransferSummary) -> str:
    verb = summary.direction.value + "ed"
    if summary.dry_run:
        verb = "would be " + verb
    return f"{summary.count} file(s) {verb}"


def main(
    argv: Sequence[str] | None = None,
    *,
    service_factory: Callable[..., S3BucketService] = S3BucketService,
) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        options = options_from_namespace(args)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return 1

    configure_logging(args.verbose)
    settings = SettingsStorage(args.settings).load()
    try:
        config = resolve_client_config(
            profile=options.profile,
            region=args.region,
            endpoint_url=args.endpoint_url,
            settings=settings,
        )
    except ValueError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return 1

    try:
        bucket = service_factory(options.bucket_name, config)
        summary = TransferEngine(bucket, options, acl=config.acl).run()
    except (OSError, ValueError, ClientError, BotoCoreError) as exc:
        LOGGER.error("%s", exc)
        return 1

    LOGGER.info(describe(summary))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
