"""Type definitions for tigris-storage."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, Union


# StreamingBody-like protocol
class StreamingBodyLike(Protocol):
    """Protocol for file-like objects compatible with StreamingBody."""

    def read(self, amt: int | None = None) -> bytes: ...
    def close(self) -> None: ...
    def iter_lines(self, chunk_size: int | None = None, limit: int | None = None) -> Iterator[bytes]: ...
    def readinto(self, b: bytearray) -> int | None: ...


# Upload bodies can be raw bytes or anything boto3 accepts as a file object
Body = Union[bytes, BinaryIO, StreamingBodyLike]


@dataclass
class Object:
    """Metadata, and optionally the body, of an object read from or put into Tigris.

    Not every call populates every field. A body returned by
    :meth:`SimpleClient.get` must be closed exactly once; using the object as
    a context manager does that for you::

        with client.get("a.txt") as obj:
            data = obj.body.read()
    """

    key: str
    bucket: str = ""
    content_type: str = ""
    content_disposition: str = ""
    etag: str = ""
    version: str = ""
    size: int = 0
    last_modified: dt.datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    url: str = ""
    body: Body | None = None

    def close(self) -> None:
        if self.body is not None and hasattr(self.body, "close"):
            self.body.close()

    def __enter__(self) -> Object:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class ListResult:
    """One page of an object listing.

    Feed ``next_token`` to ``with_pagination_token`` to fetch the next page.
    """

    items: list[Object] = field(default_factory=list)
    next_token: str = ""
    has_more: bool = False


@dataclass
class ForkOrSnapshotInfo:
    """Fork/snapshot metadata of a bucket, read from Tigris response headers."""

    snapshots_enabled: bool = False
    source_bucket: str = ""  # set when the bucket is a fork
    source_bucket_snapshot: str = ""  # set when the bucket is a fork
    is_fork_parent: bool = False


@dataclass
class BucketInfo:
    """Metadata about a bucket."""

    name: str
    created: dt.datetime | None = None
    snapshots_enabled: bool = False
    is_fork_parent: bool = False
    source_bucket: str = ""
    source_snapshot: str = ""


@dataclass
class BucketList:
    buckets: list[BucketInfo] = field(default_factory=list)
    next_token: str = ""
    truncated: bool = False


@dataclass
class SnapshotInfo:
    """Metadata about a bucket snapshot.

    ``version`` is empty for freshly created snapshots; list the bucket's
    snapshots to discover it.
    """

    name: str
    bucket: str
    version: str = ""
    created: dt.datetime | None = None


@dataclass
class SnapshotList:
    bucket: str
    snapshots: list[SnapshotInfo] = field(default_factory=list)
