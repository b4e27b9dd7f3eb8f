from __future__ import annotations
"""Upload and download walks driving an :class:`S3BucketService`."""
from contextlib import closing
import logging
import mimetypes
import os
import shutil
from typing import Iterator, Optional

from .models import Direction, TransferOptions, TransferSummary
from .paths import PathTranslator, has_unsafe_segments, relative_key
from .settings import DEFAULT_ACL

LOGGER = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 64 * 1024


def content_type_for(path: str) -> Optional[str]:
    """Guess a content type from the file extension, ``None`` if unknown."""

    content_type, _ = mimetypes.guess_type(path, strict=False)
    return content_type


def iter_local_files(root: str) -> Iterator[str]:
    """Yield every regular file below *root*, or *root* itself if it is a file.

    Walk errors are raised rather than skipped.
    """

    if not os.path.isdir(root):
        yield root
        return

    def _raise(exc: OSError) -> None:
        raise exc

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for name in filenames:
            path = os.path.join(dirpath, name)
            if os.path.isfile(path):
                yield path


class TransferEngine:
    """Moves files between a local tree and a bucket prefix.

    Every planned transfer is logged before it is attempted. The first error
    aborts the run; nothing already transferred is rolled back.
    """

    def __init__(self, bucket, options: TransferOptions, *, acl: str | None = None):
        self._bucket = bucket
        self._options = options
        self._acl = acl or DEFAULT_ACL

    def run(self) -> TransferSummary:
        if self._options.is_upload:
            return self.upload()
        return self.download()

    def upload(self) -> TransferSummary:
        options = self._options
        source = options.source_path
        if not os.path.exists(source):
            raise FileNotFoundError(f"'{source}' not found")

        translator = PathTranslator(source, options.dest_path)
        summary = TransferSummary(Direction.UPLOAD, dry_run=options.dry_run)
        for filename in iter_local_files(source):
            key = translator.to_remote(filename)
            content_type = content_type_for(filename)
            LOGGER.info("upload '%s' -> '%s'", filename, key)
            LOGGER.debug("content type for '%s': %s", filename, content_type or "<none>")
            if not options.dry_run:
                with open(filename, "rb") as handle:
                    data = handle.read()
                self._bucket.put(key, data, content_type=content_type, acl=self._acl)
            summary.count += 1
        return summary

    def download(self) -> TransferSummary:
        options = self._options
        translator = PathTranslator(options.source_path, options.dest_path)
        summary = TransferSummary(Direction.DOWNLOAD, dry_run=options.dry_run)

        pending = [options]
        while pending:
            current = pending.pop()
            listing = self._bucket.list(current.source_path, "/")
            for key in listing.keys:
                if key.endswith("/"):
                    LOGGER.debug("skipping directory marker '%s'", key)
                    continue
                filename = self._local_path(translator, key)
                if filename is None:
                    continue
                LOGGER.info("download %s -> %s", key, filename)
                if not options.dry_run:
                    self._download_object(key, filename)
                summary.count += 1

            children = [
                prefix
                for prefix in listing.common_prefixes
                if prefix != current.source_path
                and self._local_path(translator, prefix.rstrip("/")) is not None
            ]
            # reversed so the stack visits children in listing order
            pending.extend(current.with_source(prefix) for prefix in reversed(children))
        return summary

    def _local_path(self, translator: PathTranslator, key: str) -> Optional[str]:
        filename = translator.to_local(key)
        if filename is None:
            remainder = relative_key(translator.source_root, key)
            if remainder is not None and has_unsafe_segments(remainder):
                LOGGER.warning("skipping '%s': it would leave '%s'", key, translator.dest_root)
            else:
                LOGGER.debug("skipping '%s': outside '%s'", key, translator.source_root)
        return filename

    def _download_object(self, key: str, filename: str) -> None:
        parent = os.path.dirname(filename)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with closing(self._bucket.get(key)) as body:
            with open(filename, "wb") as handle:
                shutil.copyfileobj(body, handle, COPY_BUFFER_SIZE)
