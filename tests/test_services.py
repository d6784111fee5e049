import unittest
from datetime import datetime, timezone

from botocore.exceptions import ClientError, EndpointConnectionError

from s3_folders.models import ListingPage, ObjectRef, StorageTier
from s3_folders.services import ConnectionConfig, ListingServiceError, S3ListingService


class FakeS3Client:
    def __init__(self, buckets=None, object_responses=None):
        self.buckets = buckets or []
        self.object_responses = iter(object_responses or [])
        self.list_objects_kwargs = []
        self.list_buckets_calls = 0

    def list_buckets(self):
        self.list_buckets_calls += 1
        if isinstance(self.buckets, Exception):
            raise self.buckets
        return {"Buckets": [{"Name": name} for name in self.buckets]}

    def list_objects_v2(self, **kwargs):
        self.list_objects_kwargs.append(kwargs)
        response = next(self.object_responses)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingFactory:
    def __init__(self, client):
        self.client = client
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return self.client


def make_service(client, **connection_overrides):
    connection = ConnectionConfig(access_key="access", secret_key="secret", **connection_overrides)
    factory = RecordingFactory(client)
    return S3ListingService(connection, client_factory=factory), factory


class S3ListingServiceTests(unittest.TestCase):
    def test_list_page_maps_prefixes_and_objects(self):
        modified = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        client = FakeS3Client(
            object_responses=[
                {
                    "CommonPrefixes": [{"Prefix": "photos/2023/"}],
                    "Contents": [
                        {"Key": "photos/a.jpg", "Size": 12, "LastModified": modified, "StorageClass": "STANDARD"},
                        {"Key": "photos/old.tar", "Size": 99, "StorageClass": "DEEP_ARCHIVE"},
                    ],
                    "IsTruncated": True,
                    "NextContinuationToken": "tok1",
                }
            ]
        )
        service, _ = make_service(client)

        page = service.list_page(bucket="media", prefix="photos/", page_size=200)

        self.assertEqual(
            ListingPage(
                folder_prefixes=["photos/2023/"],
                object_items=[
                    ObjectRef(key="photos/a.jpg", size=12, last_modified=modified),
                    ObjectRef(key="photos/old.tar", size=99, storage_tier=StorageTier.DEEP_ARCHIVE),
                ],
                next_continuation_token="tok1",
                is_truncated=True,
            ),
            page,
        )
        self.assertEqual(
            {"Bucket": "media", "MaxKeys": 200, "Prefix": "photos/", "Delimiter": "/"},
            client.list_objects_kwargs[0],
        )

    def test_list_page_passes_token_and_omits_empty_prefix(self):
        client = FakeS3Client(object_responses=[{"IsTruncated": False}])
        service, _ = make_service(client)

        page = service.list_page(
            bucket="media", prefix="", page_size=5000, continuation_token="tok2"
        )

        self.assertEqual(
            {"Bucket": "media", "MaxKeys": 1000, "Delimiter": "/", "ContinuationToken": "tok2"},
            client.list_objects_kwargs[0],
        )
        self.assertEqual([], page.folder_prefixes)
        self.assertEqual([], page.object_items)
        self.assertIsNone(page.next_continuation_token)
        self.assertFalse(page.is_truncated)

    def test_client_error_is_wrapped_with_code(self):
        error = ClientError(
            {"Error": {"Code": "NoSuchBucket", "Message": "The bucket does not exist"}},
            "ListObjectsV2",
        )
        client = FakeS3Client(object_responses=[error])
        service, _ = make_service(client)

        with self.assertRaises(ListingServiceError) as ctx:
            service.list_page(bucket="missing", prefix="", page_size=10)

        self.assertEqual("NoSuchBucket", ctx.exception.code)
        self.assertIs(error, ctx.exception.__cause__)

    def test_connection_error_is_wrapped_without_code(self):
        client = FakeS3Client(
            object_responses=[EndpointConnectionError(endpoint_url="https://s3.invalid")]
        )
        service, _ = make_service(client)

        with self.assertRaises(ListingServiceError) as ctx:
            service.list_page(bucket="media", prefix="", page_size=10)

        self.assertIsNone(ctx.exception.code)

    def test_list_buckets_returns_names(self):
        client = FakeS3Client(buckets=["alpha", "beta"])
        service, _ = make_service(client)

        self.assertEqual(["alpha", "beta"], service.list_buckets())

    def test_list_buckets_wraps_errors(self):
        client = FakeS3Client(
            buckets=ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "ListBuckets")
        )
        service, _ = make_service(client)

        with self.assertRaises(ListingServiceError) as ctx:
            service.list_buckets()

        self.assertEqual("AccessDenied", ctx.exception.code)

    def test_client_is_created_once_with_timeouts(self):
        client = FakeS3Client(
            buckets=["alpha"],
            object_responses=[{"IsTruncated": False}, {"IsTruncated": False}],
        )
        service, factory = make_service(
            client,
            endpoint_url="https://minio.local",
            region="eu-west-1",
            connect_timeout=3,
            read_timeout=7,
            max_attempts=2,
        )

        service.list_buckets()
        service.list_page(bucket="alpha", prefix="", page_size=10)
        service.list_page(bucket="alpha", prefix="a/", page_size=10)

        self.assertEqual(1, len(factory.calls))
        args, kwargs = factory.calls[0]
        self.assertEqual(("s3",), args)
        self.assertEqual("https://minio.local", kwargs["endpoint_url"])
        self.assertEqual("eu-west-1", kwargs["region_name"])
        self.assertEqual("access", kwargs["aws_access_key_id"])
        self.assertEqual("secret", kwargs["aws_secret_access_key"])
        config = kwargs["config"]
        self.assertEqual(3, config.connect_timeout)
        self.assertEqual(7, config.read_timeout)
        self.assertEqual(2, config.retries["max_attempts"])

    def test_blank_endpoint_uses_default(self):
        client = FakeS3Client(buckets=[])
        service, factory = make_service(client, endpoint_url="")

        service.list_buckets()

        self.assertIsNone(factory.calls[0][1]["endpoint_url"])


class StorageTierTests(unittest.TestCase):
    def test_from_value(self):
        self.assertIs(StorageTier.STANDARD, StorageTier.from_value(None))
        self.assertIs(StorageTier.GLACIER, StorageTier.from_value("glacier"))
        self.assertIs(StorageTier.UNKNOWN, StorageTier.from_value("MOON"))

    def test_is_archived(self):
        self.assertTrue(StorageTier.DEEP_ARCHIVE.is_archived)
        self.assertTrue(StorageTier.GLACIER.is_archived)
        self.assertFalse(StorageTier.GLACIER_IR.is_archived)
        self.assertFalse(StorageTier.STANDARD.is_archived)


if __name__ == "__main__":
    unittest.main()
