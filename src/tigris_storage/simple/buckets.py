"""Bucket management for :class:`~tigris_storage.simple.SimpleClient`."""

from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import (
    BucketNameRequiredError,
    BucketNotEmptyError,
    BucketNotFoundError,
    SnapshotRequiredError,
    StorageOperationError,
    UnexpectedResponseError,
)
from ..headers import header_params
from ..types import BucketInfo, BucketList, SnapshotInfo, SnapshotList
from ..utils import decode_snapshot_name, drop_unset, error_code, storage_error
from .bucket_options import BucketOption, BucketOptions, resolve_bucket_options

if TYPE_CHECKING:
    from ..client import Client

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"NoSuchBucket", "NotFound", "404"})
_NOT_EMPTY_CODES = frozenset({"BucketNotEmpty"})
# Services without Tigris' fork/snapshot headers reject the lookup with these
_UNSUPPORTED_CODES = frozenset({"NotImplemented", "501", "MethodNotAllowed", "405"})


def _bucket_error(message: str, exc: BaseException, *, operation: str, bucket: str) -> StorageOperationError:
    code = error_code(exc)
    if code in _NOT_FOUND_CODES:
        error_cls = BucketNotFoundError
    elif code in _NOT_EMPTY_CODES:
        error_cls = BucketNotEmptyError
    else:
        error_cls = StorageOperationError
    return storage_error(message, exc, operation=operation, bucket=bucket, error_cls=error_cls)


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class BucketOperations:
    """Bucket-level operations of the simplified client."""

    _storage: Client

    def create_bucket(self, bucket: str, *options: BucketOption) -> BucketInfo:
        """Create a new bucket.

        Use :func:`with_enable_snapshot` for a bucket that can be snapshotted
        and forked.

        ``created`` is the local time of the call; the service doesn't echo it.
        Use :meth:`list_buckets` for the authoritative value.

        Raises
        ------
        BucketNameRequiredError
            If *bucket* is empty.
        StorageOperationError
            If the service rejects the request.
        """
        if not bucket:
            raise BucketNameRequiredError()

        o = resolve_bucket_options(*options)
        logger.debug("Creating bucket %s (snapshots: %s)", bucket, o.enable_snapshot)
        try:
            if o.enable_snapshot:
                self._storage.create_snapshot_enabled_bucket(bucket, *o.headers)
            else:
                self._storage.s3_client.create_bucket(Bucket=bucket, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise _bucket_error(
                f"simplestorage: can't create bucket {bucket}", exc, operation="create_bucket", bucket=bucket
            ) from exc

        return BucketInfo(name=bucket, created=_now())

    def delete_bucket(self, bucket: str, *options: BucketOption) -> None:
        """Delete a bucket.

        A bucket that still holds objects can only be deleted with
        :func:`with_force_delete`, which deletes its objects one by one first.

        Raises
        ------
        BucketNameRequiredError
            If *bucket* is empty.
        BucketNotEmptyError
            If the bucket holds objects and force delete is off.
        BucketNotFoundError
            If the bucket doesn't exist.
        """
        if not bucket:
            raise BucketNameRequiredError()

        o = resolve_bucket_options(*options)
        if o.force_delete:
            try:
                self._empty_bucket(bucket, o)
            except (ClientError, BotoCoreError) as exc:
                raise _bucket_error(
                    f"simplestorage: can't empty bucket {bucket}", exc, operation="delete_bucket", bucket=bucket
                ) from exc

        logger.debug("Deleting bucket %s", bucket)
        try:
            self._storage.s3_client.delete_bucket(Bucket=bucket, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise _bucket_error(
                f"simplestorage: can't delete bucket {bucket}", exc, operation="delete_bucket", bucket=bucket
            ) from exc

    def _empty_bucket(self, bucket: str, o: BucketOptions) -> None:
        s3 = self._storage.s3_client
        resp = s3.list_objects_v2(Bucket=bucket, **header_params(o.headers))
        contents = resp.get("Contents", [])
        logger.debug("Emptying bucket %s (%d objects)", bucket, len(contents))
        for obj in contents:
            s3.delete_object(Bucket=bucket, Key=obj["Key"], **header_params(o.headers))

    def list_buckets(self, *options: BucketOption) -> BucketList:
        """List the buckets the credentials have access to.

        Use :func:`with_list_limit` and :func:`with_list_token` to paginate.
        """
        o = resolve_bucket_options(*options)
        params = drop_unset({"MaxBuckets": o.max_keys, "ContinuationToken": o.continuation_token})
        try:
            resp = self._storage.s3_client.list_buckets(**params, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise storage_error("simplestorage: can't list buckets", exc, operation="list_buckets") from exc

        next_token = resp.get("ContinuationToken") or ""
        return BucketList(
            buckets=[
                BucketInfo(name=b["Name"], created=b.get("CreationDate"))
                for b in resp.get("Buckets", [])
            ],
            next_token=next_token,
            truncated=bool(next_token),
        )

    def get_bucket_info(self, bucket: str, *options: BucketOption) -> BucketInfo:
        """Get metadata about a bucket, including Tigris fork/snapshot details.

        Against a service that doesn't support the fork/snapshot lookup, only
        the name is returned.

        Raises
        ------
        BucketNameRequiredError
            If *bucket* is empty.
        BucketNotFoundError
            If the bucket doesn't exist.
        StorageOperationError
            For any other failure of the lookup.
        """
        if not bucket:
            raise BucketNameRequiredError()

        o = resolve_bucket_options(*options)
        try:
            info = self._storage.head_bucket_fork_or_snapshot(bucket, *o.headers)
        except UnexpectedResponseError as exc:
            logger.warning("No fork/snapshot metadata for bucket %s: %s", bucket, exc)
            return BucketInfo(name=bucket)
        except (ClientError, BotoCoreError) as exc:
            if error_code(exc) in _UNSUPPORTED_CODES:
                logger.warning("Fork/snapshot metadata not supported for bucket %s: %s", bucket, exc)
                return BucketInfo(name=bucket)
            raise _bucket_error(
                f"simplestorage: can't get info for bucket {bucket}", exc, operation="get_bucket_info", bucket=bucket
            ) from exc

        return BucketInfo(
            name=bucket,
            snapshots_enabled=info.snapshots_enabled,
            is_fork_parent=info.is_fork_parent,
            source_bucket=info.source_bucket,
            source_snapshot=info.source_bucket_snapshot,
        )

    def create_bucket_snapshot(self, bucket: str, description: str, *options: BucketOption) -> SnapshotInfo:
        """Take a snapshot of a bucket created with snapshots enabled.

        The service doesn't return the snapshot version here, so ``version``
        is empty. Use :meth:`list_bucket_snapshots` to find it.
        """
        if not bucket:
            raise BucketNameRequiredError()

        o = resolve_bucket_options(*options)
        try:
            self._storage.create_bucket_snapshot(bucket, description, *o.headers)
        except (ClientError, BotoCoreError) as exc:
            raise _bucket_error(
                f"simplestorage: can't create snapshot for bucket {bucket}",
                exc,
                operation="create_bucket_snapshot",
                bucket=bucket,
            ) from exc

        return SnapshotInfo(name=description, bucket=bucket, version="", created=_now())

    def list_bucket_snapshots(self, bucket: str, *options: BucketOption) -> SnapshotList:
        if not bucket:
            raise BucketNameRequiredError()

        o = resolve_bucket_options(*options)
        try:
            resp = self._storage.list_bucket_snapshots(bucket, *o.headers)
        except (ClientError, BotoCoreError) as exc:
            raise _bucket_error(
                f"simplestorage: can't list snapshots for bucket {bucket}",
                exc,
                operation="list_bucket_snapshots",
                bucket=bucket,
            ) from exc

        result = SnapshotList(bucket=bucket)
        for b in resp.get("Buckets", []):
            name, version = decode_snapshot_name(b.get("Name", ""))
            result.snapshots.append(
                SnapshotInfo(name=name, version=version, created=b.get("CreationDate"), bucket=bucket)
            )
        return result

    def fork_bucket(self, source: str, target: str, *options: BucketOption) -> BucketInfo:
        """Create *target* as a fork of *source*.

        Use :func:`with_snapshot_version` to fork from a specific snapshot
        instead of the live bucket.

        Raises
        ------
        BucketNameRequiredError
            If *source* or *target* is empty.
        SnapshotRequiredError
            If an empty snapshot version was given.
        """
        if not source:
            raise BucketNameRequiredError("source")
        if not target:
            raise BucketNameRequiredError("target")

        o = resolve_bucket_options(*options)
        if o.snapshot_version == "":
            raise SnapshotRequiredError()

        try:
            self._storage.create_bucket_fork(source, target, *o.headers)
        except (ClientError, BotoCoreError) as exc:
            raise _bucket_error(
                f"simplestorage: can't fork bucket {source} to {target}", exc, operation="fork_bucket", bucket=target
            ) from exc

        # snapshots_enabled isn't known yet, get_bucket_info reads it
        return BucketInfo(
            name=target,
            created=_now(),
            source_bucket=source,
            source_snapshot=o.snapshot_version or "",
        )
