from __future__ import annotations
"""Client configuration and settings file helpers."""

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_ACL = "bucket-owner-full-control"
CANNED_ACLS = frozenset(
    {
        "private",
        "public-read",
        "public-read-write",
        "authenticated-read",
        "aws-exec-read",
        "bucket-owner-read",
        "bucket-owner-full-control",
    }
)

ENV_REGION = "S3SYNC_REGION"
ENV_ENDPOINT_URL = "S3SYNC_ENDPOINT_URL"
ENV_ACL = "S3SYNC_ACL"


@dataclass(frozen=True)
class ClientConfig:
    """Everything needed to build an S3 client for one bucket.

    ``profile`` replaces the ``AWS_PROFILE`` environment variable: it is
    handed to the boto3 session directly instead of being set process-wide.
    """

    profile: str = ""
    region: str = ""
    endpoint_url: str = ""
    acl: str = DEFAULT_ACL


@dataclass
class SyncSettings:
    """Persistent defaults read from the settings file."""

    region: str = ""
    endpoint_url: str = ""
    acl: str = DEFAULT_ACL


class SettingsStorage:
    """Reads :class:`SyncSettings` from a JSON file."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".pys3sync_settings.json"
        self._path = Path(storage_path)

    def load(self) -> SyncSettings:
        if not self._path.exists():
            return SyncSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.debug("Ignoring unreadable settings file %s: %s", self._path, exc)
            return SyncSettings()
        if not isinstance(data, dict):
            return SyncSettings()
        acl = _as_str(data.get("acl")) or DEFAULT_ACL
        if acl not in CANNED_ACLS:
            LOGGER.debug("Unknown ACL '%s' in settings, using %s", acl, DEFAULT_ACL)
            acl = DEFAULT_ACL
        return SyncSettings(
            region=_as_str(data.get("region")),
            endpoint_url=_as_str(data.get("endpoint_url")),
            acl=acl,
        )


def resolve_client_config(
    *,
    profile: str = "",
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    settings: SyncSettings | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Merge flags, environment and settings file, in that order of priority."""

    settings = settings or SyncSettings()
    environ = os.environ if environ is None else environ
    acl = environ.get(ENV_ACL) or settings.acl
    if acl not in CANNED_ACLS:
        raise ValueError(f"Unsupported ACL '{acl}'")
    return ClientConfig(
        profile=profile or "",
        region=region or environ.get(ENV_REGION) or settings.region,
        endpoint_url=endpoint_url or environ.get(ENV_ENDPOINT_URL) or settings.endpoint_url,
        acl=acl,
    )


def _as_str(value) -> str:
    return value.strip() if isinstance(value, str) else ""
