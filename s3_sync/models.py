from __future__ import annotations
"""Data models describing a sync run and S3 listings."""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class Direction(Enum):
    """Which way files flow between the local tree and the bucket."""

    UPLOAD = "upload"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class RemoteLocator:
    """Bucket and key parsed from an ``s3://bucket/key`` URI."""

    bucket: str
    key: str = ""


@dataclass(frozen=True)
class TransferOptions:
    """Resolved command-line options for a single run."""

    bucket_name: str
    source_path: str
    dest_path: str
    direction: Direction
    dry_run: bool = False
    profile: str = ""

    @property
    def is_upload(self) -> bool:
        return self.direction is Direction.UPLOAD

    def with_source(self, source_path: str) -> TransferOptions:
        return replace(self, source_path=source_path)


@dataclass
class ObjectEntry:
    """A single object returned by a listing call."""

    key: str
    size: Optional[int] = None


@dataclass
class ListingPage:
    """Objects and common prefixes found directly below a prefix."""

    entries: list[ObjectEntry] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)

    @property
    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]


@dataclass
class TransferSummary:
    """Outcome of a completed run."""

    direction: Direction
    count: int = 0
    dry_run: bool = False
