"""Tigris-specific request headers and the botocore hooks that send them.

Tigris extends the S3 API with HTTP headers instead of extra endpoints. Each
extension is a :class:`RequestHeader`; pass a list of them to any call on a
hooked client through the ``TigrisHeaders`` parameter::

    s3.list_objects_v2(Bucket="images", TigrisHeaders=[with_query("`Content-Type` = 'image/png'")])

The headers travel in botocore's per-request context, so concurrent calls on
the same client never see each other's headers.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from email.utils import formatdate
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import quote_plus

if TYPE_CHECKING:
    from botocore.client import BaseClient


HEADERS_PARAM = "TigrisHeaders"
_CONTEXT_KEY = "tigris_headers"


class TigrisHeader(str, Enum):
    """Names of the Tigris extension headers."""

    ENABLE_SNAPSHOT = "X-Tigris-Enable-Snapshot"
    SNAPSHOT = "X-Tigris-Snapshot"
    SNAPSHOT_VERSION = "X-Tigris-Snapshot-Version"
    FORK_SOURCE_BUCKET = "X-Tigris-Fork-Source-Bucket"
    FORK_SOURCE_BUCKET_SNAPSHOT = "X-Tigris-Fork-Source-Bucket-Snapshot"
    IS_FORK_PARENT = "X-Tigris-Is-Fork-Parent"
    REGIONS = "X-Tigris-Regions"
    QUERY = "X-Tigris-Query"
    CAS = "X-Tigris-CAS"
    RENAME = "X-Tigris-Rename"


class Region(str, Enum):
    """Tigris regions, see https://www.tigrisdata.com/docs/concepts/regions/."""

    FRA = "fra"  # Frankfurt, Germany
    GRU = "gru"  # São Paulo, Brazil
    HKG = "hkg"  # Hong Kong, China
    IAD = "iad"  # Ashburn, Virginia, USA
    JNB = "jnb"  # Johannesburg, South Africa
    LHR = "lhr"  # London, UK
    MAD = "mad"  # Madrid, Spain
    NRT = "nrt"  # Tokyo (Narita), Japan
    ORD = "ord"  # Chicago, Illinois, USA
    SIN = "sin"  # Singapore
    SJC = "sjc"  # San Jose, California, USA
    SYD = "syd"  # Sydney, Australia

    EUROPE = "eur"  # European datacenters
    USA = "usa"  # American datacenters


@dataclass(frozen=True)
class RequestHeader:
    """A single header added to one outgoing request."""

    name: str
    value: str


def with_header(name: str | TigrisHeader, value: str) -> RequestHeader:
    """Set an arbitrary HTTP header on the request."""
    if isinstance(name, TigrisHeader):
        name = name.value
    return RequestHeader(name, value)


def with_static_replication_regions(regions: Iterable[Region | str]) -> RequestHeader:
    """Set the regions the object is replicated to.

    Note that you are charged once per region for the same object.
    """
    values = [r.value if isinstance(r, Region) else str(r) for r in regions]
    return with_header(TigrisHeader.REGIONS, ",".join(values))


def with_query(query: str) -> RequestHeader:
    """Filter objects in a ListObjectsV2 request, like a SQL WHERE clause.

    See https://www.tigrisdata.com/docs/objects/query-metadata/.
    """
    return with_header(TigrisHeader.QUERY, query)


def with_create_object_if_not_exists() -> RequestHeader:
    return with_header("If-Match", '""')


def with_if_etag_matches(etag: str) -> RequestHeader:
    return with_header("If-Match", etag)


def _http_date(when: dt.datetime) -> str:
    if when.tzinfo is None:
        when = when.replace(tzinfo=dt.timezone.utc)
    return formatdate(when.timestamp(), usegmt=True)


def with_modified_since(modified_since: dt.datetime) -> RequestHeader:
    """Proceed only if the object was modified after *modified_since*.

    Naive datetimes are taken as UTC.
    """
    return with_header("If-Modified-Since", _http_date(modified_since))


def with_unmodified_since(unmodified_since: dt.datetime) -> RequestHeader:
    """Proceed only if the object was not modified after *unmodified_since*."""
    return with_header("If-Unmodified-Since", _http_date(unmodified_since))


def with_compare_and_swap() -> RequestHeader:
    """Skip the cache and read the object from its designated region (GET only)."""
    return with_header(TigrisHeader.CAS, "true")


def with_enable_snapshot() -> RequestHeader:
    """Enable snapshots (and forks) when creating a bucket."""
    return with_header(TigrisHeader.ENABLE_SNAPSHOT, "true")


def with_take_snapshot(description: str) -> RequestHeader:
    """Take a snapshot named *description* of a snapshot-enabled bucket."""
    return with_header(TigrisHeader.SNAPSHOT, f"true; name={quote_plus(description)}")


def with_snapshot_version(version: str) -> RequestHeader:
    """Read from (or fork) the given snapshot version instead of the live bucket."""
    return with_header(TigrisHeader.SNAPSHOT_VERSION, version)


def with_fork_source_bucket(bucket: str) -> RequestHeader:
    return with_header(TigrisHeader.FORK_SOURCE_BUCKET, bucket)


def with_list_snapshots(bucket: str) -> RequestHeader:
    """Turn a ListBuckets call into a listing of *bucket*'s snapshots."""
    return with_header(TigrisHeader.SNAPSHOT, bucket)


def with_rename() -> RequestHeader:
    """Make a CopyObject call rename the object in place instead of copying its data."""
    return with_header(TigrisHeader.RENAME, "true")


def _stash_headers(params: dict[str, Any], context: dict[str, Any], **kwargs: Any) -> None:
    headers = params.pop(HEADERS_PARAM, None)
    if headers:
        context[_CONTEXT_KEY] = list(headers)


def _apply_headers(params: dict[str, Any], context: dict[str, Any], **kwargs: Any) -> None:
    # Repeated names are sent once, values joined in order
    merged: dict[str, list[str]] = {}
    for header in context.get(_CONTEXT_KEY, ()):
        merged.setdefault(header.name, []).append(header.value)
    for name, values in merged.items():
        params["headers"][name] = ", ".join(values)


def install_header_hooks(s3_client: BaseClient) -> BaseClient:
    """Teach *s3_client* to accept the ``TigrisHeaders`` parameter.

    Safe to call more than once on the same client.
    """
    events = s3_client.meta.events
    events.register(
        "provide-client-params.s3.*",
        _stash_headers,
        unique_id="tigris-storage-stash-headers",
    )
    events.register(
        "before-call.s3.*",
        _apply_headers,
        unique_id="tigris-storage-apply-headers",
    )
    return s3_client


def header_params(headers: Iterable[RequestHeader]) -> dict[str, list[RequestHeader]]:
    """Keyword arguments passing *headers* to a hooked boto3 call, if there are any."""
    headers = list(headers)
    return {HEADERS_PARAM: headers} if headers else {}
