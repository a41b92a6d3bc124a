"""Per-call options for bucket management operations."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from ..headers import (
    Region,
    RequestHeader,
    with_enable_snapshot as _enable_snapshot_header,
    with_snapshot_version as _snapshot_version_header,
    with_static_replication_regions,
)


@dataclass(frozen=True)
class BucketOptions:
    # Enable snapshots when creating a bucket
    enable_snapshot: bool = False

    # Snapshot to target, e.g. when forking from a specific snapshot
    snapshot_version: str | None = None

    # Static replication region of the bucket
    region: str | None = None

    # Delete every object before deleting the bucket
    force_delete: bool = False

    # list_buckets pagination
    max_keys: int | None = None
    continuation_token: str | None = None

    headers: tuple[RequestHeader, ...] = ()


BucketOption = Callable[[BucketOptions], BucketOptions]


def resolve_bucket_options(*options: BucketOption) -> BucketOptions:
    resolved = BucketOptions()
    for option in options:
        resolved = option(resolved)
    return resolved


def with_enable_snapshot() -> BucketOption:
    """Enable snapshots (and forks) when creating a bucket."""
    return lambda o: replace(
        o,
        enable_snapshot=True,
        headers=o.headers + (_enable_snapshot_header(),),
    )


def with_snapshot_version(version: str) -> BucketOption:
    """Target a snapshot version, e.g. to fork a bucket as of that snapshot."""
    return lambda o: replace(
        o,
        snapshot_version=version,
        headers=o.headers + (_snapshot_version_header(version),),
    )


def with_bucket_region(region: Region | str) -> BucketOption:
    """Set the static replication region of the bucket.

    See https://www.tigrisdata.com/docs/concepts/regions/.
    """
    value = region.value if isinstance(region, Region) else region
    return lambda o: replace(
        o,
        region=value,
        headers=o.headers + (with_static_replication_regions([value]),),
    )


def with_force_delete() -> BucketOption:
    """Empty a bucket before deleting it."""
    return lambda o: replace(o, force_delete=True)


def with_list_limit(limit: int) -> BucketOption:
    """Maximum number of buckets returned by ``list_buckets``."""
    return lambda o: replace(o, max_keys=limit)


def with_list_token(token: str) -> BucketOption:
    """Continue a ``list_buckets`` listing from ``BucketList.next_token``."""
    return lambda o: replace(o, continuation_token=token)


def with_bucket_headers(*headers: RequestHeader) -> BucketOption:
    return lambda o: replace(o, headers=o.headers + headers)
