"""Utility functions for request parameters, error codes and snapshot names."""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote_plus

from botocore.exceptions import ClientError

from .exceptions import StorageOperationError


def drop_unset(params: dict[str, Any]) -> dict[str, Any]:
    """Remove parameters that are *None*.

    Falsy values that were set explicitly (``0``, ``""``) are kept.
    """
    return {k: v for k, v in params.items() if v is not None}


def drop_zero(params: dict[str, Any]) -> dict[str, Any]:
    """Remove parameters holding their type's zero value.

    Parameters
    ----------
    params : dict[str, Any]
        Request parameters.

    Returns
    -------
    dict[str, Any]
        Parameters without ``None``, ``""``, ``0`` and empty containers.
    """
    return {k: v for k, v in params.items() if v}


def error_code(exc: BaseException) -> str:
    """Return the S3 error code of a botocore ``ClientError`` or ``""``."""
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", ""))
    return ""


def decode_snapshot_name(name: str) -> tuple[str, str]:
    """Split a listed snapshot name into ``(description, version)``.

    Snapshot listings name entries ``<version>; name=<escaped description>``.
    Entries without a description use the raw name for both.

    Parameters
    ----------
    name : str
        Name as returned in the bucket listing.

    Returns
    -------
    tuple[str, str]
    """
    version, sep, rest = name.partition(";")
    rest = rest.strip()
    if sep and rest.startswith("name="):
        return unquote_plus(rest[len("name="):]), version.strip()
    return name, name


def storage_error(
    message: str,
    exc: BaseException,
    *,
    operation: str,
    bucket: str = "",
    key: str = "",
    error_cls: type[StorageOperationError] = StorageOperationError,
) -> StorageOperationError:
    """Wrap a botocore error with the failed operation and its bucket/key.

    Raise the result ``from exc`` to keep the original error as the cause.
    """
    return error_cls(f"{message}: {exc}", operation=operation, bucket=bucket, key=key)
