"""Per-call options for :class:`~tigris_storage.simple.SimpleClient` object operations."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from ..headers import RequestHeader
from ..settings import TigrisSettings


@dataclass(frozen=True)
class CallOptions:
    """Options for a single call.

    Optional fields are *None* when unset, so ``max_keys=0`` or ``prefix=""``
    set on purpose are sent as given.
    """

    bucket: str = ""
    headers: tuple[RequestHeader, ...] = ()

    # List options
    start_after: str | None = None
    max_keys: int | None = None
    delimiter: str | None = None
    prefix: str | None = None
    pagination_token: str | None = None

    # Presign options
    content_type: str | None = None
    content_disposition: str | None = None

    @classmethod
    def defaults(cls, settings: TigrisSettings) -> CallOptions:
        return cls(bucket=settings.bucket)


CallOption = Callable[[CallOptions], CallOptions]


def resolve_call_options(settings: TigrisSettings, *options: CallOption) -> CallOptions:
    """Derive this call's options from the client settings, last option wins."""
    resolved = CallOptions.defaults(settings)
    for option in options:
        resolved = option(resolved)
    return resolved


def override_bucket(bucket: str) -> CallOption:
    """Run this call against *bucket* instead of the client's bucket."""
    return lambda o: replace(o, bucket=bucket)


def with_headers(*headers: RequestHeader) -> CallOption:
    """Add Tigris headers (see :mod:`tigris_storage.headers`) to this call."""
    return lambda o: replace(o, headers=o.headers + headers)


def with_start_after(start_after: str) -> CallOption:
    """List keys after *start_after*. Use this if you need pagination in list calls."""
    return lambda o: replace(o, start_after=start_after)


def with_max_keys(max_keys: int) -> CallOption:
    return lambda o: replace(o, max_keys=max_keys)


def with_delimiter(delimiter: str) -> CallOption:
    return lambda o: replace(o, delimiter=delimiter)


def with_prefix(prefix: str) -> CallOption:
    return lambda o: replace(o, prefix=prefix)


def with_pagination_token(token: str) -> CallOption:
    """Continue a listing from ``ListResult.next_token``."""
    return lambda o: replace(o, pagination_token=token)


def with_content_type(content_type: str) -> CallOption:
    """Content-Type a presigned PUT URL requires the upload to have."""
    return lambda o: replace(o, content_type=content_type)


def with_content_disposition(disposition: str) -> CallOption:
    """Content-Disposition a presigned PUT URL requires the upload to have."""
    return lambda o: replace(o, content_disposition=disposition)
