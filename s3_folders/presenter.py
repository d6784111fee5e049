from __future__ import annotations
"""View-agnostic listing client; fetches run inline or on a worker thread."""
import logging
import threading
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from .listing import FetchTicket, ListingSession, StaleResponseDiscarded
from .models import ListingEntry, ListingPage, ListingStatus, ObjectRef
from .paths import child_prefix, parent_prefix
from .services import ListingService, ListingServiceError


DispatchFn = Callable[[Callable[[], None]], None]
RunnerFn = Callable[[Callable[[], None]], None]

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 200


def _format_error(exc: Exception) -> str:
    return str(exc)


def _start_thread(task: Callable[[], None]) -> None:
    threading.Thread(target=task, daemon=True).start()


def _run_inline(task: Callable[[], None]) -> None:
    task()


class ListingListener:
    """Receives state notifications from :class:`FolderListingClient`.

    Subclasses override what they need; every hook defaults to a no-op.
    """

    def on_loading_started(self, status: ListingStatus) -> None:
        pass

    def on_loading_finished(self, status: ListingStatus) -> None:
        pass

    def on_changed(self) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass


class FolderListingClient:
    """Browses one bucket prefix by prefix, a page at a time.

    ``runner`` decides where the blocking service call happens and
    ``dispatch`` hands the result back to the thread that owns the client,
    e.g. a UI event loop. Passing ``dispatch`` switches the default runner to
    a daemon thread per fetch; without it fetches run inline on the calling
    thread, so results are never merged from a worker thread unless the
    caller asks for that explicitly. State transitions are serialised by a
    lock either way.
    """

    def __init__(
        self,
        *,
        service: ListingService,
        bucket: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        delimiter: str = "/",
        dispatch: DispatchFn | None = None,
        runner: RunnerFn | None = None,
        listener: ListingListener | None = None,
    ) -> None:
        self._service = service
        self._bucket = bucket
        self._page_size = max(int(page_size), 1)
        self._delimiter = delimiter
        self._dispatch = dispatch or (lambda func: func())
        if runner is None:
            runner = _start_thread if dispatch is not None else _run_inline
        self._runner = runner
        self._lock = threading.RLock()
        self._listeners: list[ListingListener] = [listener] if listener else []
        self._session = ListingSession()
        self._last_error: str | None = None

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def prefix(self) -> str:
        return self._session.prefix

    @property
    def status(self) -> ListingStatus:
        return self._session.status

    @property
    def folders(self) -> list[str]:
        return self._session.folders

    @property
    def files(self) -> list[ObjectRef]:
        return self._session.files

    @property
    def filtered_view(self) -> list[ListingEntry]:
        return self._session.filtered_view()

    @property
    def has_more(self) -> bool:
        return self._session.has_more

    @property
    def is_loading(self) -> bool:
        return self._session.is_loading

    @property
    def query(self) -> str:
        return self._session.query

    @property
    def pages_loaded(self) -> int:
        return self._session.pages_loaded

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def add_listener(self, listener: ListingListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ListingListener) -> None:
        self._listeners = [item for item in self._listeners if item is not listener]

    def open(self, prefix: str) -> None:
        """Start listing ``prefix`` from its first page, superseding any earlier fetch."""

        with self._lock:
            self._last_error = None
            ticket = self._session.begin_open(prefix)
            self._notify(lambda listener: listener.on_changed())
            self._fetch(ticket)

    def load_more(self) -> bool:
        """Fetch the next page if one exists and nothing is in flight.

        Returns ``False`` without doing anything otherwise; scroll handlers
        may call this as often as they like.
        """

        with self._lock:
            ticket = self._session.begin_load_more()
            if ticket is None:
                return False
            self._fetch(ticket)
            return True

    def load_all(self, max_pages: int | None = None) -> int:
        """Keep loading pages until exhausted or ``max_pages`` have been merged.

        Only drains the listing with a synchronous ``runner``; with a
        background runner it requests a single page. Returns the number of
        pages merged so far.
        """

        while max_pages is None or self.pages_loaded < max_pages:
            if not self.load_more():
                break
        return self.pages_loaded

    def refresh(self) -> None:
        self.open(self._session.prefix)

    def open_folder(self, folder_prefix: str) -> None:
        self._session.set_filter("")
        self.open(child_prefix(self._session.prefix, folder_prefix))

    def navigate_up(self) -> bool:
        if not self._session.prefix:
            return False
        self._session.set_filter("")
        self.open(parent_prefix(self._session.prefix))
        return True

    def set_filter(self, query: str | None) -> list[ListingEntry]:
        with self._lock:
            self._session.set_filter(query)
            self._notify(lambda listener: listener.on_changed())
            return self._session.filtered_view()

    def _fetch(self, ticket: FetchTicket) -> None:
        status = self._session.status
        LOGGER.debug(
            "Fetching %s page for bucket '%s' prefix '%s'",
            "first" if ticket.is_initial else "next",
            self._bucket,
            ticket.prefix,
        )
        self._notify(lambda listener: listener.on_loading_started(status))

        def task() -> None:
            try:
                page = self._service.list_page(
                    bucket=self._bucket,
                    prefix=ticket.prefix,
                    delimiter=self._delimiter,
                    page_size=self._page_size,
                    continuation_token=ticket.continuation_token,
                )
            except (ListingServiceError, BotoCoreError, ClientError) as exc:
                LOGGER.exception(
                    "List objects error for bucket '%s' prefix '%s'", self._bucket, ticket.prefix
                )
                self._dispatch(lambda exc=exc: self._handle_error(ticket, exc))
            except Exception as exc:
                LOGGER.exception(
                    "Unexpected list objects error for bucket '%s' prefix '%s'",
                    self._bucket,
                    ticket.prefix,
                )
                self._dispatch(lambda exc=exc: self._handle_error(ticket, exc))
            else:
                self._dispatch(lambda: self._handle_page(ticket, page))

        self._runner(task)

    def _handle_page(self, ticket: FetchTicket, page: ListingPage) -> None:
        with self._lock:
            try:
                added_folders, added_files = self._session.apply_page(ticket, page)
            except StaleResponseDiscarded:
                return
            LOGGER.debug(
                "Merged %d folder(s) and %d file(s) for prefix '%s' (more: %s)",
                added_folders,
                added_files,
                ticket.prefix,
                self._session.has_more,
            )
            self._last_error = None
            status = self._session.status
            self._notify(lambda listener: listener.on_loading_finished(status))
            self._notify(lambda listener: listener.on_changed())

    def _handle_error(self, ticket: FetchTicket, exc: Exception) -> None:
        with self._lock:
            try:
                status = self._session.apply_error(ticket)
            except StaleResponseDiscarded:
                return
            message = _format_error(exc)
            self._last_error = message
            self._notify(lambda listener: listener.on_loading_finished(status))
            self._notify(lambda listener: listener.on_error(message))

    def _notify(self, call: Callable[[ListingListener], None]) -> None:
        for listener in list(self._listeners):
            call(listener)
