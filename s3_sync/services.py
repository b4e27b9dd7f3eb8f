from __future__ import annotations
"""Thin adapter over a boto3 S3 client bound to one bucket."""
import logging
from typing import Callable, Optional

import boto3
from botocore.client import Config

from .models import ListingPage, ObjectEntry
from .settings import ClientConfig

LOGGER = logging.getLogger(__name__)


class S3BucketService:
    """Issues list/get/put calls against a single bucket.

    Raises:
        botocore.exceptions.ProfileNotFound: when ``config.profile`` names an
            unknown profile.
    """

    def __init__(
        self,
        bucket_name: str,
        config: ClientConfig | None = None,
        session_factory: Callable[..., object] | None = None,
    ):
        self.bucket_name = bucket_name
        self.config = config or ClientConfig()
        self._session_factory = session_factory or boto3.session.Session
        self._client = self._create_client()

    def _create_client(self):
        session_kwargs = {}
        if self.config.profile:
            session_kwargs["profile_name"] = self.config.profile
        session = self._session_factory(**session_kwargs)
        client_kwargs = {"config": Config(signature_version="s3v4")}
        if self.config.region:
            client_kwargs["region_name"] = self.config.region
        if self.config.endpoint_url:
            client_kwargs["endpoint_url"] = self.config.endpoint_url
        LOGGER.debug(
            "Creating S3 client for bucket '%s' (profile=%s, region=%s, endpoint=%s)",
            self.bucket_name,
            self.config.profile or "<default>",
            self.config.region or "<default>",
            self.config.endpoint_url or "<default>",
        )
        return session.client("s3", **client_kwargs)

    def list(self, prefix: str = "", delimiter: str | None = "/") -> ListingPage:
        """Return every object and common prefix directly below *prefix*.

        Truncated responses are followed with continuation tokens, so the
        result covers the whole level.
        """

        page = ListingPage()
        request_token: str | None = None
        while True:
            list_params = {"Bucket": self.bucket_name}
            if prefix:
                list_params["Prefix"] = prefix
            if delimiter:
                list_params["Delimiter"] = delimiter
            if request_token:
                list_params["ContinuationToken"] = request_token

            response = self._client.list_objects_v2(**list_params)
            page.entries.extend(
                ObjectEntry(key=obj["Key"], size=obj.get("Size"))
                for obj in response.get("Contents", [])
            )
            page.common_prefixes.extend(
                common["Prefix"] for common in response.get("CommonPrefixes", [])
            )

            request_token = response.get("NextContinuationToken")
            if not response.get("IsTruncated", False) or not request_token:
                break
        LOGGER.debug(
            "Listed '%s': %d object(s), %d prefix(es)",
            prefix,
            len(page.entries),
            len(page.common_prefixes),
        )
        return page

    def get(self, key: str):
        """Return the streaming body for *key*; the caller must close it."""

        response = self._client.get_object(Bucket=self.bucket_name, Key=key)
        return response["Body"]

    def put(
        self,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
        acl: Optional[str] = None,
    ) -> None:
        params = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": body,
            "ACL": acl or self.config.acl,
        }
        if content_type:
            params["ContentType"] = content_type
        self._client.put_object(**params)
