"""Tigris Storage - helpers for using Tigris object storage through boto3."""

from __future__ import annotations

from .client import Client, new
from .exceptions import (
    BucketNameRequiredError,
    BucketNotEmptyError,
    BucketNotFoundError,
    ConfigurationError,
    EmptyKeyError,
    InvalidExpiryError,
    InvalidRequestError,
    NoBucketNameError,
    SnapshotRequiredError,
    StorageOperationError,
    TigrisStorageError,
    UnexpectedResponseError,
    UnsupportedMethodError,
)
from .headers import (
    HEADERS_PARAM,
    Region,
    RequestHeader,
    TigrisHeader,
    install_header_hooks,
)
from .settings import (
    FLY_ENDPOINT,
    GLOBAL_ENDPOINT,
    Option,
    TigrisSettings,
    resolve_settings,
    with_access_keypair,
    with_bucket,
    with_endpoint,
    with_fly_endpoint,
    with_global_endpoint,
    with_path_style,
    with_region,
)
from .types import (
    BucketInfo,
    BucketList,
    ForkOrSnapshotInfo,
    ListResult,
    Object,
    SnapshotInfo,
    SnapshotList,
    StreamingBodyLike,
)

__all__ = [
    # Main classes
    "Client",
    "new",
    "TigrisSettings",
    # Settings
    "Option",
    "resolve_settings",
    "GLOBAL_ENDPOINT",
    "FLY_ENDPOINT",
    "with_global_endpoint",
    "with_fly_endpoint",
    "with_endpoint",
    "with_region",
    "with_path_style",
    "with_access_keypair",
    "with_bucket",
    # Headers
    "HEADERS_PARAM",
    "Region",
    "RequestHeader",
    "TigrisHeader",
    "install_header_hooks",
    # Types
    "Object",
    "ListResult",
    "BucketInfo",
    "BucketList",
    "SnapshotInfo",
    "SnapshotList",
    "ForkOrSnapshotInfo",
    "StreamingBodyLike",
    # Exceptions
    "TigrisStorageError",
    "ConfigurationError",
    "NoBucketNameError",
    "InvalidRequestError",
    "UnsupportedMethodError",
    "EmptyKeyError",
    "InvalidExpiryError",
    "BucketNameRequiredError",
    "SnapshotRequiredError",
    "StorageOperationError",
    "BucketNotFoundError",
    "BucketNotEmptyError",
    "UnexpectedResponseError",
]
