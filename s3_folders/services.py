from __future__ import annotations
"""Business logic for listing S3 buckets and prefixes."""
from dataclasses import dataclass
import logging
from typing import Callable, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .models import ListingPage, ObjectRef, StorageTier

LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
MAX_PAGE_SIZE = 1000


class ListingServiceError(RuntimeError):
    """Raised when the storage service cannot answer a listing request."""

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class ConnectionConfig:
    """Everything needed to build one S3 client."""

    access_key: str
    secret_key: str
    endpoint_url: str | None = None
    region: str = DEFAULT_REGION
    connect_timeout: int = 10
    read_timeout: int = 30
    max_attempts: int = 3


class ListingService(Protocol):
    def list_page(
        self,
        *,
        bucket: str,
        prefix: str,
        delimiter: str = "/",
        page_size: int,
        continuation_token: str | None = None,
    ) -> ListingPage: ...


def _wrap_error(exc: Exception) -> ListingServiceError:
    code = None
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")
    return ListingServiceError(str(exc), code=code)


class S3ListingService:
    """Encapsulates S3 listing calls independent of any UI technology.

    The boto3 client is created once per service and reused for every page.
    """

    def __init__(
        self,
        connection: ConnectionConfig,
        client_factory: Callable[..., object] | None = None,
    ):
        self._connection = connection
        self._client_factory = client_factory or boto3.client
        self._client = None

    @property
    def connection(self) -> ConnectionConfig:
        return self._connection

    def list_buckets(self) -> list[str]:
        """Return the available bucket names.

        Raises:
            ListingServiceError: when unable to connect or list buckets.
        """

        try:
            response = self._get_client().list_buckets()
        except (BotoCoreError, ClientError) as exc:
            raise _wrap_error(exc) from exc
        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def list_page(
        self,
        *,
        bucket: str,
        prefix: str,
        delimiter: str = "/",
        page_size: int,
        continuation_token: str | None = None,
    ) -> ListingPage:
        """Fetch a single ``list_objects_v2`` page below ``prefix``."""

        list_params = {
            "Bucket": bucket,
            "MaxKeys": max(1, min(int(page_size), MAX_PAGE_SIZE)),
        }
        if prefix:
            list_params["Prefix"] = prefix
        if delimiter:
            list_params["Delimiter"] = delimiter
        if continuation_token:
            list_params["ContinuationToken"] = continuation_token

        LOGGER.debug(
            "list_objects_v2 bucket='%s' prefix='%s' token=%s",
            bucket,
            prefix,
            "yes" if continuation_token else "no",
        )
        try:
            response = self._get_client().list_objects_v2(**list_params)
        except (BotoCoreError, ClientError) as exc:
            raise _wrap_error(exc) from exc

        return ListingPage(
            folder_prefixes=[common["Prefix"] for common in response.get("CommonPrefixes", [])],
            object_items=[self._to_object_ref(item) for item in response.get("Contents", [])],
            next_continuation_token=response.get("NextContinuationToken"),
            is_truncated=bool(response.get("IsTruncated", False)),
        )

    def _to_object_ref(self, item: dict) -> ObjectRef:
        return ObjectRef(
            key=item["Key"],
            size=int(item.get("Size") or 0),
            last_modified=item.get("LastModified"),
            storage_tier=StorageTier.from_value(item.get("StorageClass")),
        )

    def _get_client(self):
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        connection = self._connection
        config = Config(
            signature_version="s3v4",
            connect_timeout=connection.connect_timeout,
            read_timeout=connection.read_timeout,
            retries={"max_attempts": connection.max_attempts},
        )
        return self._client_factory(
            "s3",
            endpoint_url=connection.endpoint_url or None,
            region_name=connection.region or DEFAULT_REGION,
            aws_access_key_id=connection.access_key,
            aws_secret_access_key=connection.secret_key,
            config=config,
        )
