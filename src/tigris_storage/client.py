"""Tigris client: a boto3 S3 client plus the Tigris-only operations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from botocore.client import BaseClient

from .exceptions import UnexpectedResponseError
from .headers import (
    RequestHeader,
    TigrisHeader,
    header_params,
    install_header_hooks,
    with_enable_snapshot,
    with_fork_source_bucket,
    with_list_snapshots,
    with_rename,
    with_take_snapshot,
)
from .settings import Option, TigrisSettings, resolve_settings
from .types import ForkOrSnapshotInfo

logger = logging.getLogger(__name__)


class Client:
    """Wrapper around a boto3 S3 client with additional methods for Tigris.

    The wrapped client is available as :attr:`s3_client` for every regular S3
    operation. It accepts a ``TigrisHeaders`` parameter on every call, see
    :mod:`tigris_storage.headers`.

    The client holds no per-call state and can be shared between threads.
    """

    def __init__(self, s3_client_or_settings: BaseClient | TigrisSettings | None = None) -> None:
        """Initialize the Tigris client.

        Parameters
        ----------
        s3_client_or_settings : BaseClient | TigrisSettings | None
            Boto3 S3 client or :class:`TigrisSettings` (which creates one).
            Settings are loaded from the environment when *None*.
        """
        if s3_client_or_settings is None:
            s3_client_or_settings = TigrisSettings()

        if isinstance(s3_client_or_settings, TigrisSettings):
            s3_client = s3_client_or_settings.create_client()
        else:
            s3_client = s3_client_or_settings

        self.s3_client: BaseClient = install_header_hooks(s3_client)

    # ------------------------------------------------------------------ #
    #  Buckets                                                            #
    # ------------------------------------------------------------------ #

    def create_bucket_fork(self, source: str, target: str, *headers: RequestHeader) -> dict[str, Any]:
        """Create *target* as a fork of the *source* bucket.

        Pass :func:`~tigris_storage.headers.with_snapshot_version` to fork from
        a specific snapshot instead of the live bucket.

        Parameters
        ----------
        source : str
            Bucket to fork.
        target : str
            Name of the new bucket.
        *headers : RequestHeader
            Extra headers for the request.

        Returns
        -------
        dict[str, Any]
            The ``create_bucket`` response.
        """
        logger.debug("Forking bucket %s into %s", source, target)
        return self.s3_client.create_bucket(
            Bucket=target,
            **header_params([*headers, with_fork_source_bucket(source)]),
        )

    def create_bucket_snapshot(self, bucket: str, description: str, *headers: RequestHeader) -> dict[str, Any]:
        """Take a snapshot of *bucket* named *description*.

        The bucket must have been created with snapshots enabled.
        """
        logger.debug("Taking snapshot %r of bucket %s", description, bucket)
        return self.s3_client.create_bucket(
            Bucket=bucket,
            **header_params([*headers, with_take_snapshot(description)]),
        )

    def create_snapshot_enabled_bucket(self, bucket: str, *headers: RequestHeader) -> dict[str, Any]:
        """Create a bucket that can be snapshotted and forked."""
        logger.debug("Creating snapshot-enabled bucket %s", bucket)
        return self.s3_client.create_bucket(
            Bucket=bucket,
            **header_params([*headers, with_enable_snapshot()]),
        )

    def head_bucket_fork_or_snapshot(self, bucket: str, *headers: RequestHeader) -> ForkOrSnapshotInfo:
        """Fetch the fork/snapshot metadata for a bucket.

        See https://www.tigrisdata.com/docs/buckets/snapshots-and-forks/.

        Parameters
        ----------
        bucket : str
            Bucket name.
        *headers : RequestHeader
            Extra headers for the request.

        Returns
        -------
        ForkOrSnapshotInfo

        Raises
        ------
        UnexpectedResponseError
            If the response carries no raw HTTP headers.
        """
        logger.debug("Reading fork/snapshot metadata of bucket %s", bucket)
        resp = self.s3_client.head_bucket(Bucket=bucket, **header_params(headers))

        raw = _http_headers(resp)
        return ForkOrSnapshotInfo(
            snapshots_enabled=raw.get(TigrisHeader.ENABLE_SNAPSHOT.value.lower()) == "true",
            source_bucket=raw.get(TigrisHeader.FORK_SOURCE_BUCKET.value.lower(), ""),
            source_bucket_snapshot=raw.get(TigrisHeader.FORK_SOURCE_BUCKET_SNAPSHOT.value.lower(), ""),
            is_fork_parent=raw.get(TigrisHeader.IS_FORK_PARENT.value.lower()) == "true",
        )

    def list_bucket_snapshots(self, bucket: str, *headers: RequestHeader) -> dict[str, Any]:
        """List the snapshots of *bucket*.

        Tigris answers with a regular ``list_buckets`` response whose entries
        are the snapshots.
        """
        logger.debug("Listing snapshots of bucket %s", bucket)
        return self.s3_client.list_buckets(**header_params([*headers, with_list_snapshots(bucket)]))

    # ------------------------------------------------------------------ #
    #  Objects                                                            #
    # ------------------------------------------------------------------ #

    def rename_object(
        self,
        bucket: str,
        source_key: str,
        target_key: str,
        *headers: RequestHeader,
        **params: Any,
    ) -> dict[str, Any]:
        """Rename an object in place instead of copying its data.

        See https://www.tigrisdata.com/docs/objects/object-rename/.

        Parameters
        ----------
        bucket : str
            Bucket holding the object.
        source_key : str
            Current key.
        target_key : str
            New key.
        *headers : RequestHeader
            Extra headers for the request.
        **params : Any
            Additional ``copy_object`` parameters.

        Returns
        -------
        dict[str, Any]
            The ``copy_object`` response.
        """
        logger.debug("Renaming %s/%s to %s", bucket, source_key, target_key)
        return self.s3_client.copy_object(
            Bucket=bucket,
            Key=target_key,
            CopySource={"Bucket": bucket, "Key": source_key},
            **params,
            **header_params([*headers, with_rename()]),
        )


def _http_headers(resp: Any) -> dict[str, str]:
    metadata = resp.get("ResponseMetadata") if isinstance(resp, Mapping) else None
    headers = metadata.get("HTTPHeaders") if isinstance(metadata, Mapping) else None
    if not isinstance(headers, Mapping):
        raise UnexpectedResponseError("unexpected response type: no raw HTTP headers in response")
    return {str(k).lower(): v for k, v in headers.items()}


def new(*options: Option) -> Client:
    """Create a :class:`Client` from the environment and functional options.

    Reads ``TIGRIS_STORAGE_ACCESS_KEY_ID`` and ``TIGRIS_STORAGE_SECRET_ACCESS_KEY``;
    without them boto3 resolves credentials itself.
    """
    return Client(resolve_settings(*options))
