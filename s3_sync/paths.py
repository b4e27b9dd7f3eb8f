from __future__ import annotations
"""Translation between local paths and S3 keys."""
import os
import posixpath
from typing import Optional

from .models import RemoteLocator

SCHEME = "s3://"


def is_remote(arg: str) -> bool:
    """Return ``True`` when *arg* is an ``s3://`` URI."""

    return arg.startswith(SCHEME)


def parse_remote(uri: str) -> RemoteLocator:
    """Split ``s3://bucket/some/key`` into bucket and key.

    Raises:
        ValueError: when *uri* is not an S3 URI or names no bucket.
    """

    if not is_remote(uri):
        raise ValueError(f"'{uri}' does not begin with {SCHEME}")
    bucket, _, key = uri[len(SCHEME):].partition("/")
    if not bucket:
        raise ValueError(f"'{uri}' does not name a bucket")
    return RemoteLocator(bucket=bucket, key=key)


def to_posix(path: str) -> str:
    if os.sep == "/":
        return path
    return path.replace(os.sep, "/")


def relative_key(root: str, path: str) -> Optional[str]:
    """Return the part of *path* below *root*, both ``/``-separated.

    An empty string means *path* is the root itself and ``None`` means it
    lies outside of it.
    """

    base = root.rstrip("/")
    if path == root or path == base:
        return ""
    if not base:
        return path.lstrip("/")
    if path.startswith(base + "/"):
        return path[len(base) + 1:]
    return None


def join_key(root: str, remainder: str) -> str:
    base = root.rstrip("/")
    if not remainder:
        return base
    if not base:
        return remainder
    return posixpath.join(base, remainder)


def has_unsafe_segments(remainder: str) -> bool:
    """Return ``True`` when a ``/``-separated remainder has empty, ``.`` or ``..`` parts."""

    return any(part in ("", ".", "..") for part in remainder.split("/"))


def _basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


class PathTranslator:
    """Rebases entries found under ``source_root`` onto ``dest_root``.

    Directory contents land directly below the destination, so
    ``/data/app/sub/b.txt`` with root ``/data/app`` and destination
    ``backup`` becomes ``backup/sub/b.txt``. An entry equal to the source
    root maps to the destination root, or to ``dest_root/<name>`` when the
    destination is empty, ends with a separator or is an existing local
    directory.
    """

    def __init__(self, source_root: str, dest_root: str):
        self.source_root = source_root
        self.dest_root = dest_root

    def to_remote(self, local_path: str) -> str:
        root = to_posix(os.path.normpath(self.source_root))
        if root == ".":
            root = ""
        path = to_posix(os.path.normpath(local_path))
        remainder = relative_key(root, path)
        if remainder is None:
            raise ValueError(f"'{local_path}' is not below '{self.source_root}'")
        if not remainder and (not self.dest_root or self.dest_root.endswith("/")):
            remainder = _basename(path)
        return join_key(self.dest_root, remainder)

    def to_local(self, key: str) -> Optional[str]:
        """Return the local path for *key*, ``None`` when it cannot be placed.

        Keys outside the source root and keys whose remainder would climb out
        of the destination (``..``, ``.`` or empty segments) yield ``None``.
        """

        remainder = relative_key(self.source_root, key)
        if remainder is None:
            return None
        dest = self.dest_root
        if not remainder:
            if dest.endswith(("/", os.sep)) or os.path.isdir(dest):
                return os.path.join(dest, _basename(key))
            return dest.rstrip("/" + os.sep) or dest
        if has_unsafe_segments(remainder):
            return None
        return os.path.join(dest, *remainder.split("/"))
