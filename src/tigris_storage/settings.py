from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from botocore.client import BaseClient


GLOBAL_ENDPOINT = "https://t3.storage.dev"
FLY_ENDPOINT = "https://fly.storage.tigris.dev"


class TigrisSettings(BaseSettings):
    """Settings for Tigris clients.

    You can adapt the following settings in your environment variables (or using and .env file):
    - TIGRIS_STORAGE_BUCKET: The default bucket for simplified clients
    - TIGRIS_STORAGE_ACCESS_KEY_ID: The access key ID of the Tigris keypair
    - TIGRIS_STORAGE_SECRET_ACCESS_KEY: The secret access key of the Tigris keypair
    - TIGRIS_STORAGE_ENDPOINT_URL: The URL of the Tigris endpoint
    - TIGRIS_STORAGE_REGION: The S3 region, "auto" unless you know better
    - TIGRIS_STORAGE_USE_PATH_STYLE: Use path-style addressing

    If the keypair is empty, boto3 falls back to its own credential chain
    (profiles, instance metadata, ...).

    Instances are frozen. Use the ``with_*`` options and :func:`resolve_settings`
    to derive modified copies.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TIGRIS_STORAGE_",
        extra="ignore",
        frozen=True,
    )

    # The endpoint URL of the Tigris server
    endpoint_url: str = GLOBAL_ENDPOINT

    # The S3 region. Tigris routes requests itself, so this is "auto"
    region: str = "auto"

    # Path-style (https://t3.storage.dev/bucket) instead of virtual-hosted-style addressing
    use_path_style: bool = False

    # The default bucket. Required by the simplified client only
    bucket: str = ""

    # The access key ID of the Tigris keypair
    access_key_id: str = ""

    # The secret access key of the Tigris keypair
    secret_access_key: str = ""

    def has_keypair(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)

    def create_client(self) -> BaseClient:
        """Create a boto3 S3 client from the settings."""

        import boto3
        from botocore.config import Config

        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if self.use_path_style else "virtual"},
        )
        kwargs = {}
        if self.has_keypair():
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key

        return boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region,
            config=config,
            **kwargs,
        )


Option = Callable[[TigrisSettings], TigrisSettings]


def _set(**update) -> Option:
    def apply(settings: TigrisSettings) -> TigrisSettings:
        return settings.model_copy(update=update)

    return apply


def with_global_endpoint() -> Option:
    """Connect to Tigris' globally available endpoint.

    If you are deployed to fly.io, use :func:`with_fly_endpoint` instead.
    """
    return _set(endpoint_url=GLOBAL_ENDPOINT)


def with_fly_endpoint() -> Option:
    """Connect to Tigris' fly.io optimized endpoint.

    If you are deployed to fly.io, this zero-rates your traffic to Tigris.
    """
    return _set(endpoint_url=FLY_ENDPOINT)


def with_endpoint(endpoint_url: str) -> Option:
    """Use a custom endpoint, e.g. a proxy or a local development server."""
    return _set(endpoint_url=endpoint_url)


def with_region(region: str) -> Option:
    """Statically specify the S3 region. Only needed where "auto" doesn't work."""
    return _set(region=region)


def with_path_style(enabled: bool) -> Option:
    """Toggle path-style addressing.

    Needed for older clients, some proxies, or local setups without wildcard DNS.
    """
    return _set(use_path_style=enabled)


def with_access_keypair(access_key_id: str, secret_access_key: str) -> Option:
    return _set(access_key_id=access_key_id, secret_access_key=secret_access_key)


def with_bucket(bucket: str) -> Option:
    """Set the default bucket for simplified clients."""
    return _set(bucket=bucket)


def resolve_settings(*options: Option, base: TigrisSettings | None = None) -> TigrisSettings:
    """Resolve settings from defaults, the environment and functional options.

    Parameters
    ----------
    *options : Option
        Applied left to right; the last option touching a field wins.
    base : TigrisSettings | None
        Starting point. Loaded from the environment when *None*.

    Returns
    -------
    TigrisSettings
    """
    settings = base if base is not None else TigrisSettings()
    for option in options:
        settings = option(settings)
    return settings
