"""Domain-specific exceptions for tigris-storage."""

from __future__ import annotations


class TigrisStorageError(Exception):
    """Base exception for tigris-storage errors."""
    pass


class ConfigurationError(TigrisStorageError):
    """Raised when a client can't be built from the resolved settings."""
    def __init__(self, message: str, errors: list[Exception] | None = None) -> None:
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: " + "; ".join(str(e) for e in self.errors)
        super().__init__(message)


class NoBucketNameError(ConfigurationError):
    """Raised when no bucket is set via TIGRIS_STORAGE_BUCKET or with_bucket()."""
    def __init__(self) -> None:
        super().__init__(
            "bucket name not set: provide the TIGRIS_STORAGE_BUCKET environment "
            "variable or use the with_bucket option"
        )


class InvalidRequestError(TigrisStorageError, ValueError):
    """Raised when call arguments are rejected before any request is made."""
    pass


class UnsupportedMethodError(InvalidRequestError):
    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(
            f"simplestorage: unsupported HTTP method {method!r} for presigned URL "
            "(supported: GET, PUT, DELETE)"
        )


class EmptyKeyError(InvalidRequestError):
    def __init__(self) -> None:
        super().__init__("simplestorage: key cannot be empty for presigned URL")


class InvalidExpiryError(InvalidRequestError):
    def __init__(self, expiry: object) -> None:
        self.expiry = expiry
        super().__init__(
            f"simplestorage: invalid expiry duration {expiry} for presigned URL (must be positive)"
        )


class BucketNameRequiredError(InvalidRequestError):
    """Raised when a bucket management call gets an empty bucket name."""
    def __init__(self, role: str = "") -> None:
        self.role = role
        label = f"{role} bucket name" if role else "bucket name"
        super().__init__(f"simplestorage: {label} required for bucket management operations")


class SnapshotRequiredError(InvalidRequestError):
    """Raised when a snapshot version is required but not provided."""
    def __init__(self) -> None:
        super().__init__("simplestorage: snapshot version required for this operation")


class StorageOperationError(TigrisStorageError):
    """Raised when a call to the storage service fails.

    The original botocore exception is available as ``__cause__``.
    """
    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        bucket: str = "",
        key: str = "",
    ) -> None:
        self.operation = operation
        self.bucket = bucket
        self.key = key
        super().__init__(message)


class BucketNotFoundError(StorageOperationError):
    """Raised when a bucket operation fails because the bucket doesn't exist."""
    pass


class BucketNotEmptyError(StorageOperationError):
    """Raised when deleting a non-empty bucket without force delete."""
    pass


class UnexpectedResponseError(TigrisStorageError):
    """Raised when a response lacks the raw HTTP headers needed to read Tigris metadata."""
    pass
