"""Tests for Tigris request headers and the hooks sending them."""

import datetime as dt
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import parse_qs, urlsplit

import pytest
from botocore.awsrequest import AWSResponse

from tigris_storage.client import Client
from tigris_storage.headers import (
    HEADERS_PARAM,
    Region,
    RequestHeader,
    TigrisHeader,
    header_params,
    install_header_hooks,
    with_compare_and_swap,
    with_create_object_if_not_exists,
    with_enable_snapshot,
    with_fork_source_bucket,
    with_header,
    with_if_etag_matches,
    with_list_snapshots,
    with_modified_since,
    with_query,
    with_rename,
    with_snapshot_version,
    with_static_replication_regions,
    with_take_snapshot,
    with_unmodified_since,
)
from tigris_storage.settings import TigrisSettings
from tigris_storage.simple import SimpleClient, with_list_limit


class TestHeaderConstructors:
    @pytest.mark.parametrize(
        ("header", "name", "value"),
        [
            (with_enable_snapshot(), "X-Tigris-Enable-Snapshot", "true"),
            (with_take_snapshot("nightly"), "X-Tigris-Snapshot", "true; name=nightly"),
            (with_snapshot_version("1751631910169675092"), "X-Tigris-Snapshot-Version", "1751631910169675092"),
            (with_fork_source_bucket("source"), "X-Tigris-Fork-Source-Bucket", "source"),
            (with_list_snapshots("images"), "X-Tigris-Snapshot", "images"),
            (with_rename(), "X-Tigris-Rename", "true"),
            (with_compare_and_swap(), "X-Tigris-CAS", "true"),
            (with_query("`Content-Type` = 'text/plain'"), "X-Tigris-Query", "`Content-Type` = 'text/plain'"),
            (with_create_object_if_not_exists(), "If-Match", '""'),
            (with_if_etag_matches('"abc"'), "If-Match", '"abc"'),
        ],
    )
    def test_header_values(self, header, name, value):
        assert header == RequestHeader(name, value)

    def test_snapshot_description_is_escaped(self):
        header = with_take_snapshot("Backup before migration")

        assert header.value == "true; name=Backup+before+migration"

    def test_replication_regions(self):
        header = with_static_replication_regions([Region.FRA, "sjc", Region.LHR])

        assert header.name == TigrisHeader.REGIONS.value
        assert header.value == "fra,sjc,lhr"

    def test_modified_since_uses_http_date(self):
        when = dt.datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt.timezone.utc)

        assert with_modified_since(when) == RequestHeader("If-Modified-Since", "Tue, 02 Jan 2024 03:04:05 GMT")
        assert with_unmodified_since(when).value == "Tue, 02 Jan 2024 03:04:05 GMT"

    def test_naive_datetime_is_utc(self):
        assert with_modified_since(dt.datetime(2024, 1, 2, 3, 4, 5)).value == "Tue, 02 Jan 2024 03:04:05 GMT"

    def test_with_header_accepts_enum(self):
        assert with_header(TigrisHeader.CAS, "true").name == "X-Tigris-CAS"
        assert with_header("X-Custom", "1") == RequestHeader("X-Custom", "1")

    def test_header_params(self):
        header = with_rename()

        assert header_params([]) == {}
        assert header_params([header]) == {HEADERS_PARAM: [header]}


class _RawBody:
    def __init__(self, body: bytes):
        self._body = body

    def stream(self, **kwargs):
        yield self._body


_RESPONSES = {
    "CopyObject": (b'<CopyObjectResult><ETag>"abc"</ETag></CopyObjectResult>', {}),
    "ListBuckets": (
        b"<ListAllMyBucketsResult><Buckets><Bucket><Name>a</Name></Bucket></Buckets>"
        b"<ContinuationToken>tok</ContinuationToken></ListAllMyBucketsResult>",
        {},
    ),
    "ListObjectsV2": (b"<ListBucketResult></ListBucketResult>", {}),
    "HeadBucket": (
        b"",
        {
            "X-Tigris-Enable-Snapshot": "true",
            "X-Tigris-Fork-Source-Bucket": "source",
            "X-Tigris-Fork-Source-Bucket-Snapshot": "42",
            "X-Tigris-Is-Fork-Parent": "false",
        },
    ),
}


@pytest.fixture
def wire():
    """Real boto3 client whose requests are captured instead of sent."""
    s3_client = TigrisSettings(access_key_id="tid_test", secret_access_key="tsec_test").create_client()
    sent = []

    def _capture(request, event_name, **kwargs):
        sent.append(request)
        operation = event_name.rsplit(".", 1)[-1]
        body, headers = _RESPONSES.get(operation, (b"", {}))
        return AWSResponse(request.url, 200, headers, _RawBody(body))

    s3_client.meta.events.register("before-send.s3", _capture)
    return Client(s3_client), sent


class TestWireHeaders:
    def test_fork_sends_source_header(self, wire):
        client, sent = wire

        client.create_bucket_fork("source", "target", with_snapshot_version("42"))

        (request,) = sent
        assert request.method == "PUT"
        assert request.headers["X-Tigris-Fork-Source-Bucket"] == "source"
        assert request.headers["X-Tigris-Snapshot-Version"] == "42"

    def test_snapshot_sends_escaped_description(self, wire):
        client, sent = wire

        client.create_bucket_snapshot("images", "Backup before migration")

        assert sent[0].headers["X-Tigris-Snapshot"] == "true; name=Backup+before+migration"

    def test_snapshot_enabled_bucket(self, wire):
        client, sent = wire

        client.create_snapshot_enabled_bucket("images")

        assert sent[0].headers["X-Tigris-Enable-Snapshot"] == "true"

    def test_list_snapshots(self, wire):
        client, sent = wire

        resp = client.list_bucket_snapshots("images")

        assert [b["Name"] for b in resp["Buckets"]] == ["a"]
        assert sent[0].headers["X-Tigris-Snapshot"] == "images"

    def test_rename(self, wire):
        client, sent = wire

        client.rename_object("images", "old.png", "new.png")

        (request,) = sent
        assert request.headers["X-Tigris-Rename"] == "true"
        assert request.headers["x-amz-copy-source"] == "images/old.png"
        assert request.url.endswith("/new.png")

    def test_head_bucket_reads_response_headers(self, wire):
        client, _ = wire

        info = client.head_bucket_fork_or_snapshot("target")

        assert info.snapshots_enabled is True
        assert info.source_bucket == "source"
        assert info.source_bucket_snapshot == "42"
        assert info.is_fork_parent is False

    def test_headers_apply_to_one_call_only(self, wire):
        client, sent = wire

        client.s3_client.list_objects_v2(Bucket="images", **header_params([with_query("`size` > 10")]))
        client.s3_client.list_objects_v2(Bucket="images")

        assert sent[0].headers["X-Tigris-Query"] == "`size` > 10"
        assert "X-Tigris-Query" not in sent[1].headers

    def test_concurrent_calls_keep_their_headers(self, wire):
        client, sent = wire

        def _list(i):
            client.s3_client.list_objects_v2(
                Bucket="images",
                Prefix=f"p{i}",
                **header_params([with_query(f"q{i}")]),
            )

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(_list, range(16)))

        assert len(sent) == 16
        for request in sent:
            query = request.headers["X-Tigris-Query"]
            assert parse_qs(urlsplit(request.url).query)["prefix"] == [f"p{query[1:]}"]

    def test_installing_hooks_twice_sends_headers_once(self, wire):
        client, sent = wire
        install_header_hooks(client.s3_client)

        client.create_snapshot_enabled_bucket("images")

        assert sent[0].headers["X-Tigris-Enable-Snapshot"] == "true"

    def test_repeated_header_values_are_joined(self, wire):
        client, sent = wire

        client.s3_client.list_objects_v2(
            Bucket="images",
            **header_params([RequestHeader("X-A", "1"), RequestHeader("X-A", "2")]),
        )

        assert sent[0].headers["X-A"] == "1, 2"

    def test_list_buckets_paginates(self, wire):
        client, sent = wire
        simple = SimpleClient(client, TigrisSettings(bucket="images"))

        result = simple.list_buckets(with_list_limit(1))

        assert parse_qs(urlsplit(sent[0].url).query)["max-buckets"] == ["1"]
        assert [b.name for b in result.buckets] == ["a"]
        assert result.next_token == "tok"
        assert result.truncated is True
