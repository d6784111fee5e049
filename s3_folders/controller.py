from __future__ import annotations
"""Controller layer tying the listing service to folder listing clients."""

from typing import Callable, Iterable

from .paths import normalize_prefix
from .presenter import DispatchFn, FolderListingClient, ListingListener, RunnerFn
from .services import ConnectionConfig, S3ListingService
from .settings import AppSettings


class NotConnectedError(RuntimeError):
    """Raised when an S3 operation is attempted before connecting."""


def filter_buckets(names: Iterable[str], query: str | None) -> list[str]:
    needle = (query or "").casefold()
    return [name for name in names if needle in name.casefold()]


class S3FoldersController:
    """Coordinates user actions with a single :class:`S3ListingService`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        service_factory: Callable[[ConnectionConfig], S3ListingService] | None = None,
    ):
        self._settings = settings or AppSettings()
        self._service_factory = service_factory or S3ListingService
        self._service: S3ListingService | None = None

    @property
    def is_connected(self) -> bool:
        return self._service is not None

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def connect(
        self,
        *,
        access_key: str,
        secret_key: str,
        endpoint_url: str | None = None,
        region: str | None = None,
    ) -> list[str]:
        connection = ConnectionConfig(
            access_key=access_key,
            secret_key=secret_key,
            endpoint_url=endpoint_url or self._settings.endpoint_url or None,
            region=region or self._settings.region,
            connect_timeout=self._settings.connect_timeout,
            read_timeout=self._settings.read_timeout,
            max_attempts=self._settings.max_attempts,
        )
        service = self._service_factory(connection)
        buckets = service.list_buckets()
        self._service = service
        return buckets

    def refresh_buckets(self) -> list[str]:
        return self._require_service().list_buckets()

    def open_bucket(
        self,
        bucket_name: str,
        *,
        prefix: str = "",
        dispatch: DispatchFn | None = None,
        runner: RunnerFn | None = None,
        listener: ListingListener | None = None,
    ) -> FolderListingClient:
        """Create a listing client for ``bucket_name`` and open ``prefix``."""

        client = FolderListingClient(
            service=self._require_service(),
            bucket=bucket_name,
            page_size=self._settings.page_size,
            dispatch=dispatch,
            runner=runner,
            listener=listener,
        )
        client.open(normalize_prefix(prefix))
        return client

    def _require_service(self) -> S3ListingService:
        if self._service is None:
            raise NotConnectedError("Not connected to S3")
        return self._service
