"""Shared fixtures for tigris-storage tests."""

from __future__ import annotations

import datetime as dt
import hashlib
import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from tigris_storage.client import Client
from tigris_storage.settings import TigrisSettings
from tigris_storage.simple import SimpleClient

ENV_VARS = (
    "TIGRIS_STORAGE_BUCKET",
    "TIGRIS_STORAGE_ACCESS_KEY_ID",
    "TIGRIS_STORAGE_SECRET_ACCESS_KEY",
    "TIGRIS_STORAGE_ENDPOINT_URL",
    "TIGRIS_STORAGE_REGION",
    "TIGRIS_STORAGE_USE_PATH_STYLE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env files out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def client_error(code: str, operation: str, status: int = 400) -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client talking to Tigris.

    Records every call as ``(operation, params, headers)`` where ``headers``
    are the Tigris headers passed through ``TigrisHeaders``.
    """

    def __init__(self):
        self.meta = MagicMock()
        self.buckets: dict[str, dict] = {}
        self.calls: list[tuple[str, dict, dict[str, str]]] = []

    def _record(self, operation, params):
        headers = {h.name: h.value for h in params.pop("TigrisHeaders", [])}
        self.calls.append((operation, dict(params), headers))
        return headers

    def operations(self):
        return [operation for operation, _, _ in self.calls]

    def _bucket(self, name, operation):
        try:
            return self.buckets[name]
        except KeyError:
            raise client_error("NoSuchBucket", operation, 404) from None

    def create_bucket(self, **params):
        headers = self._record("create_bucket", params)
        name = params["Bucket"]

        snapshot = headers.get("X-Tigris-Snapshot")
        if snapshot:
            bucket = self._bucket(name, "CreateBucket")
            _, _, description = snapshot.partition("name=")
            version = f"{len(bucket['snapshots']) + 1:020d}"
            bucket["snapshots"].append(f"{version}; name={description}")
            return {}

        if name in self.buckets:
            raise client_error("BucketAlreadyOwnedByYou", "CreateBucket", 409)

        objects = {}
        source = headers.get("X-Tigris-Fork-Source-Bucket", "")
        if source:
            objects = dict(self._bucket(source, "CreateBucket")["objects"])
            self.buckets[source]["is_fork_parent"] = True

        self.buckets[name] = {
            "created": dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc),
            "objects": objects,
            "snapshots": [],
            "snapshots_enabled": headers.get("X-Tigris-Enable-Snapshot") == "true",
            "is_fork_parent": False,
            "source": source,
            "source_snapshot": headers.get("X-Tigris-Snapshot-Version", "") if source else "",
        }
        return {}

    def delete_bucket(self, **params):
        self._record("delete_bucket", params)
        bucket = self._bucket(params["Bucket"], "DeleteBucket")
        if bucket["objects"]:
            raise client_error("BucketNotEmpty", "DeleteBucket", 409)
        del self.buckets[params["Bucket"]]
        return {}

    def head_bucket(self, **params):
        self._record("head_bucket", params)
        try:
            bucket = self.buckets[params["Bucket"]]
        except KeyError:
            raise client_error("404", "HeadBucket", 404) from None
        headers = {"x-tigris-enable-snapshot": "true" if bucket["snapshots_enabled"] else "false"}
        headers["x-tigris-is-fork-parent"] = "true" if bucket["is_fork_parent"] else "false"
        if bucket["source"]:
            headers["x-tigris-fork-source-bucket"] = bucket["source"]
            headers["x-tigris-fork-source-bucket-snapshot"] = bucket["source_snapshot"]
        return {"ResponseMetadata": {"HTTPStatusCode": 200, "HTTPHeaders": headers}}

    def list_buckets(self, **params):
        headers = self._record("list_buckets", params)
        snapshots_of = headers.get("X-Tigris-Snapshot")
        if snapshots_of:
            bucket = self._bucket(snapshots_of, "ListBuckets")
            return {
                "Buckets": [
                    {"Name": name, "CreationDate": bucket["created"]} for name in bucket["snapshots"]
                ]
            }

        names = sorted(self.buckets)
        token = params.get("ContinuationToken")
        if token:
            names = [n for n in names if n > token]
        limit = params.get("MaxBuckets", 10000)
        page = names[:limit]
        resp = {"Buckets": [{"Name": n, "CreationDate": self.buckets[n]["created"]} for n in page]}
        if len(names) > limit:
            resp["ContinuationToken"] = page[-1]
        return resp

    def put_object(self, **params):
        self._record("put_object", params)
        bucket = self._bucket(params["Bucket"], "PutObject")
        body = params["Body"]
        data = body.read() if hasattr(body, "read") else bytes(body)
        etag = '"' + hashlib.md5(data).hexdigest() + '"'
        bucket["objects"][params["Key"]] = {
            "data": data,
            "etag": etag,
            "content_type": params.get("ContentType", "binary/octet-stream"),
            "metadata": params.get("Metadata", {}),
        }
        return {"ETag": etag}

    def _object(self, params, operation):
        bucket = self._bucket(params["Bucket"], operation)
        try:
            return bucket["objects"][params["Key"]]
        except KeyError:
            raise client_error("NoSuchKey", operation, 404) from None

    def get_object(self, **params):
        self._record("get_object", params)
        obj = self._object(params, "GetObject")
        return {
            "Body": io.BytesIO(obj["data"]),
            "ETag": obj["etag"],
            "ContentLength": len(obj["data"]),
            "ContentType": obj["content_type"],
            "Metadata": obj["metadata"],
        }

    def head_object(self, **params):
        self._record("head_object", params)
        obj = self._object(params, "HeadObject")
        return {
            "ETag": obj["etag"],
            "ContentLength": len(obj["data"]),
            "ContentType": obj["content_type"],
            "Metadata": obj["metadata"],
        }

    def delete_object(self, **params):
        self._record("delete_object", params)
        self._bucket(params["Bucket"], "DeleteObject")["objects"].pop(params["Key"], None)
        return {}

    def list_objects_v2(self, **params):
        self._record("list_objects_v2", params)
        objects = self._bucket(params["Bucket"], "ListObjectsV2")["objects"]
        keys = sorted(k for k in objects if k.startswith(params.get("Prefix", "")))
        after = params.get("ContinuationToken") or params.get("StartAfter")
        if after:
            keys = [k for k in keys if k > after]
        limit = params.get("MaxKeys", 1000)
        page = keys[:limit]
        resp = {
            "Contents": [
                {"Key": k, "ETag": objects[k]["etag"], "Size": len(objects[k]["data"])} for k in page
            ],
            "IsTruncated": len(keys) > limit,
        }
        if resp["IsTruncated"]:
            resp["NextContinuationToken"] = page[-1]
        return resp

    def generate_presigned_url(self, client_method, Params=None, ExpiresIn=3600):
        self.calls.append(("generate_presigned_url", {"method": client_method, "params": Params, "expires_in": ExpiresIn}, {}))
        return f"https://t3.storage.dev/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def mock_s3():
    """Mock boto3 S3 client."""
    return MagicMock()


@pytest.fixture
def settings():
    return TigrisSettings(bucket="test-bucket")


@pytest.fixture
def simple(mock_s3, settings):
    """SimpleClient over a mocked boto3 client."""
    return SimpleClient(Client(mock_s3), settings)


@pytest.fixture
def simple_fake(fake_s3, settings):
    """SimpleClient over the in-memory fake."""
    return SimpleClient(Client(fake_s3), settings)


@pytest.fixture
def make_client_error():
    """Factory for botocore ``ClientError`` instances."""
    return client_error
