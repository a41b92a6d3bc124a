"""Simplified Tigris client bound to a single bucket."""

from __future__ import annotations

from .bucket_options import (
    BucketOption,
    BucketOptions,
    with_bucket_headers,
    with_bucket_region,
    with_enable_snapshot,
    with_force_delete,
    with_list_limit,
    with_list_token,
    with_snapshot_version,
)
from .client import DEFAULT_CONTENT_TYPE, SimpleClient, new, validate_settings
from .options import (
    CallOption,
    CallOptions,
    override_bucket,
    with_content_disposition,
    with_content_type,
    with_delimiter,
    with_headers,
    with_max_keys,
    with_pagination_token,
    with_prefix,
    with_start_after,
)

__all__ = [
    "SimpleClient",
    "new",
    "validate_settings",
    "DEFAULT_CONTENT_TYPE",
    # Per-call options
    "CallOption",
    "CallOptions",
    "override_bucket",
    "with_headers",
    "with_start_after",
    "with_max_keys",
    "with_delimiter",
    "with_prefix",
    "with_pagination_token",
    "with_content_type",
    "with_content_disposition",
    # Bucket options
    "BucketOption",
    "BucketOptions",
    "with_enable_snapshot",
    "with_snapshot_version",
    "with_bucket_region",
    "with_force_delete",
    "with_list_limit",
    "with_list_token",
    "with_bucket_headers",
]
