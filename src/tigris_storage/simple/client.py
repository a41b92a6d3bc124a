"""High-level Tigris client bound to one bucket."""

from __future__ import annotations

import datetime as dt
import logging
import math

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from ..client import Client
from ..exceptions import (
    ConfigurationError,
    EmptyKeyError,
    InvalidExpiryError,
    NoBucketNameError,
    UnsupportedMethodError,
)
from ..headers import header_params
from ..settings import Option, TigrisSettings, resolve_settings
from ..types import ListResult, Object
from ..utils import drop_unset, drop_zero, storage_error
from .buckets import BucketOperations
from .options import CallOption, resolve_call_options

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_PRESIGN_OPERATIONS = {
    "GET": "get_object",
    "PUT": "put_object",
    "DELETE": "delete_object",
}


def validate_settings(settings: TigrisSettings) -> None:
    """Check that *settings* can back a :class:`SimpleClient`.

    Raises
    ------
    NoBucketNameError
        If no bucket is configured.
    ConfigurationError
        If more than one check fails; the failures are in ``errors``.
    """
    errors: list[ConfigurationError] = []
    if not settings.bucket:
        errors.append(NoBucketNameError())

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ConfigurationError("simplestorage: can't create client", errors)


class SimpleClient(BucketOperations):
    """Client for Tigris reducing common interactions to very high level calls.

    Object operations run against the configured bucket unless a call uses
    :func:`~tigris_storage.simple.override_bucket`. Options passed to a call
    only affect that call.
    """

    def __init__(self, storage: Client | BaseClient | TigrisSettings, settings: TigrisSettings) -> None:
        """Initialize the simplified client.

        Parameters
        ----------
        storage : Client | BaseClient | TigrisSettings
            Tigris client performing the calls, or a boto3 S3 client or
            settings to build one from. Nothing is built if validation fails.
        settings : TigrisSettings
            Resolved settings; ``bucket`` must be set.

        Raises
        ------
        NoBucketNameError
            If ``settings.bucket`` is empty.
        """
        validate_settings(settings)
        self._storage = storage if isinstance(storage, Client) else Client(storage)
        self.settings = settings

    @property
    def storage(self) -> Client:
        """The underlying :class:`~tigris_storage.Client`."""
        return self._storage

    # ------------------------------------------------------------------ #
    #  Objects                                                            #
    # ------------------------------------------------------------------ #

    def get(self, key: str, *options: CallOption) -> Object:
        """Fetch an object's contents and metadata.

        The returned object's ``body`` is open; close it (or use the object
        as a context manager) when done, or the connection leaks.

        Parameters
        ----------
        key : str
            Object key.
        *options : CallOption
            Per-call options.

        Returns
        -------
        Object

        Raises
        ------
        StorageOperationError
            If the object is missing or the call fails.
        """
        o = resolve_call_options(self.settings, *options)
        logger.debug("Getting %s/%s", o.bucket, key)
        try:
            resp = self._storage.s3_client.get_object(Bucket=o.bucket, Key=key, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise storage_error(
                f"simplestorage: can't get {o.bucket}/{key}", exc, operation="get", bucket=o.bucket, key=key
            ) from exc

        return Object(
            bucket=o.bucket,
            key=key,
            content_type=resp.get("ContentType") or DEFAULT_CONTENT_TYPE,
            content_disposition=resp.get("ContentDisposition", ""),
            etag=resp.get("ETag", ""),
            size=resp.get("ContentLength", 0),
            version=resp.get("VersionId", ""),
            last_modified=resp.get("LastModified"),
            metadata=dict(resp.get("Metadata") or {}),
            body=resp["Body"],
        )

    def head(self, key: str, *options: CallOption) -> Object:
        """Fetch an object's metadata without its contents."""
        o = resolve_call_options(self.settings, *options)
        logger.debug("Heading %s/%s", o.bucket, key)
        try:
            resp = self._storage.s3_client.head_object(Bucket=o.bucket, Key=key, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise storage_error(
                f"simplestorage: can't head {o.bucket}/{key}", exc, operation="head", bucket=o.bucket, key=key
            ) from exc

        return Object(
            bucket=o.bucket,
            key=key,
            content_type=resp.get("ContentType") or DEFAULT_CONTENT_TYPE,
            content_disposition=resp.get("ContentDisposition", ""),
            etag=resp.get("ETag", ""),
            size=resp.get("ContentLength", 0),
            version=resp.get("VersionId", ""),
            last_modified=resp.get("LastModified"),
            metadata=dict(resp.get("Metadata") or {}),
        )

    def put(self, obj: Object, *options: CallOption) -> Object:
        """Store an object.

        Empty ``content_type``/``content_disposition``/``metadata`` and a zero
        ``size`` are left out of the request instead of being sent.

        On success ``obj.bucket``, ``obj.etag`` and ``obj.version`` are
        updated in place and *obj* is returned.
        """
        o = resolve_call_options(self.settings, *options)
        params = drop_zero(
            {
                "ContentType": obj.content_type,
                "ContentDisposition": obj.content_disposition,
                "ContentLength": obj.size,
                "Metadata": obj.metadata,
            }
        )
        logger.debug("Putting %s/%s", o.bucket, obj.key)
        try:
            resp = self._storage.s3_client.put_object(
                Bucket=o.bucket,
                Key=obj.key,
                Body=obj.body if obj.body is not None else b"",
                **params,
                **header_params(o.headers),
            )
        except (ClientError, BotoCoreError) as exc:
            raise storage_error(
                f"simplestorage: can't put {o.bucket}/{obj.key}", exc, operation="put", bucket=o.bucket, key=obj.key
            ) from exc

        obj.bucket = o.bucket
        obj.etag = resp.get("ETag", "")
        obj.version = resp.get("VersionId", "")
        return obj

    def delete(self, key: str, *options: CallOption) -> None:
        """Delete an object. Deleting a missing key is not an error."""
        o = resolve_call_options(self.settings, *options)
        logger.debug("Deleting %s/%s", o.bucket, key)
        try:
            self._storage.s3_client.delete_object(Bucket=o.bucket, Key=key, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise storage_error(
                f"simplestorage: can't delete {o.bucket}/{key}", exc, operation="delete", bucket=o.bucket, key=key
            ) from exc

    def list(self, *options: CallOption) -> ListResult:
        """List one page of objects.

        Filter with :func:`with_prefix`, :func:`with_delimiter`,
        :func:`with_start_after` and :func:`with_max_keys`. Pass
        ``next_token`` of the result to :func:`with_pagination_token` to get
        the next page; ``has_more`` tells whether there is one.
        """
        o = resolve_call_options(self.settings, *options)
        params = drop_unset(
            {
                "Delimiter": o.delimiter,
                "Prefix": o.prefix,
                "MaxKeys": o.max_keys,
                "ContinuationToken": o.pagination_token,
                "StartAfter": o.start_after,
            }
        )
        logger.debug("Listing %s", o.bucket)
        try:
            resp = self._storage.s3_client.list_objects_v2(Bucket=o.bucket, **params, **header_params(o.headers))
        except (ClientError, BotoCoreError) as exc:
            raise storage_error(f"simplestorage: can't list {o.bucket}", exc, operation="list", bucket=o.bucket) from exc

        next_token = (resp.get("NextContinuationToken") or "") if resp.get("IsTruncated") else ""
        return ListResult(
            items=[
                Object(
                    bucket=o.bucket,
                    key=item.get("Key", ""),
                    etag=item.get("ETag", ""),
                    size=item.get("Size", 0),
                    last_modified=item.get("LastModified"),
                )
                for item in resp.get("Contents", [])
            ],
            next_token=next_token,
            has_more=bool(next_token),
        )

    def presign_url(
        self,
        method: str,
        key: str,
        expiry: int | float | dt.timedelta,
        *options: CallOption,
    ) -> str:
        """Generate a presigned URL for *method* on *key*.

        Supported methods are exactly ``"GET"`` (download), ``"PUT"``
        (upload) and ``"DELETE"``. For PUT, :func:`with_content_type` and
        :func:`with_content_disposition` are signed into the URL, so the
        upload must send the same values.

        Parameters
        ----------
        method : str
            HTTP method.
        key : str
            Object key.
        expiry : int | float | timedelta
            How long the URL stays valid, in seconds or as a timedelta.
        *options : CallOption
            Per-call options.

        Returns
        -------
        str

        Raises
        ------
        UnsupportedMethodError
            If *method* isn't GET, PUT or DELETE.
        EmptyKeyError
            If *key* is empty.
        InvalidExpiryError
            If *expiry* isn't a positive, finite duration.
        """
        if method not in _PRESIGN_OPERATIONS:
            raise UnsupportedMethodError(method)
        if not key:
            raise EmptyKeyError()
        seconds = expiry.total_seconds() if isinstance(expiry, dt.timedelta) else expiry
        if not math.isfinite(seconds) or seconds <= 0:
            raise InvalidExpiryError(expiry)

        o = resolve_call_options(self.settings, *options)
        params = {"Bucket": o.bucket, "Key": key}
        if method == "PUT":
            params.update(
                drop_unset({"ContentType": o.content_type, "ContentDisposition": o.content_disposition})
            )

        try:
            return self._storage.s3_client.generate_presigned_url(
                _PRESIGN_OPERATIONS[method],
                Params=params,
                ExpiresIn=math.ceil(seconds),
            )
        except (ClientError, BotoCoreError) as exc:
            raise storage_error(
                f"simplestorage: presign {method.lower()}", exc, operation="presign", bucket=o.bucket, key=key
            ) from exc


def new(*options: Option, s3_client: BaseClient | None = None) -> SimpleClient:
    """Create a :class:`SimpleClient` from the environment and functional options.

    Reads ``TIGRIS_STORAGE_BUCKET``, ``TIGRIS_STORAGE_ACCESS_KEY_ID`` and
    ``TIGRIS_STORAGE_SECRET_ACCESS_KEY``. The bucket must be set there or
    with :func:`~tigris_storage.settings.with_bucket`.

    Parameters
    ----------
    *options : Option
        Functional options, applied after the environment.
    s3_client : BaseClient | None
        Use this boto3 client instead of building one from the settings.

    Raises
    ------
    NoBucketNameError
        If no bucket is configured.
    """
    settings = resolve_settings(*options)
    return SimpleClient(s3_client if s3_client is not None else settings, settings)
