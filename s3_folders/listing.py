from __future__ import annotations
"""Incremental listing state for a single folder prefix.

A :class:`ListingSession` accumulates the folders and files below one prefix
as pages arrive from the listing service. It never talks to the service
itself: callers ask it for a :class:`FetchTicket`, perform the fetch however
they like, and hand the result back together with the ticket. A ticket that
no longer matches the fetch the session is waiting for belongs to a
superseded request and is rejected with :class:`StaleResponseDiscarded`.

Filtering is a read-only projection over the accumulated entries; it never
triggers a fetch and never changes what has been loaded.
"""
from dataclasses import dataclass
import logging
from typing import Optional

from .models import ListingEntry, ListingPage, ListingStatus, ObjectRef
from .paths import file_display_name, folder_display_name

LOGGER = logging.getLogger(__name__)


class StaleResponseDiscarded(Exception):
    """Raised when a fetch result arrives for a request that was superseded."""


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one in-flight fetch issued by a session."""

    generation: int
    prefix: str
    continuation_token: Optional[str] = None

    @property
    def is_initial(self) -> bool:
        return self.continuation_token is None


def filter_entries(
    folders: list[str],
    files: list[ObjectRef],
    query: str,
) -> list[ListingEntry]:
    """Return folders then files whose display name contains ``query``."""

    needle = (query or "").casefold()
    entries: list[ListingEntry] = []
    for prefix in folders:
        name = folder_display_name(prefix)
        if needle in name.casefold():
            entries.append(ListingEntry(kind="folder", identity=prefix, name=name))
    for obj in files:
        name = file_display_name(obj.key)
        if needle in name.casefold():
            entries.append(ListingEntry(kind="file", identity=obj.key, name=name, obj=obj))
    return entries


class ListingSession:
    """State machine for the entries below one prefix."""

    def __init__(self, prefix: str = ""):
        self._generation = 0
        self._query = ""
        self._reset(prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def status(self) -> ListingStatus:
        return self._status

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def folders(self) -> list[str]:
        return list(self._folders)

    @property
    def files(self) -> list[ObjectRef]:
        return list(self._files)

    @property
    def continuation_token(self) -> str | None:
        return self._continuation_token

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def has_more(self) -> bool:
        # Nothing to continue until a first page has been merged.
        if self._status not in (ListingStatus.READY, ListingStatus.LOADING_MORE):
            return False
        return not self._exhausted

    @property
    def is_loading(self) -> bool:
        return self._in_flight is not None

    @property
    def pages_loaded(self) -> int:
        return self._pages_loaded

    @property
    def query(self) -> str:
        return self._query

    def begin_open(self, prefix: str) -> FetchTicket:
        """Reset to ``prefix`` and return the ticket for its first page.

        Any fetch still outstanding for an earlier open becomes stale.
        """

        self._generation += 1
        self._reset(prefix)
        self._status = ListingStatus.LOADING
        self._in_flight = FetchTicket(generation=self._generation, prefix=prefix)
        return self._in_flight

    def begin_load_more(self) -> FetchTicket | None:
        """Return a ticket for the next page, or ``None`` when there is nothing to do."""

        if self._status is not ListingStatus.READY:
            return None
        if self._exhausted or self._in_flight is not None:
            return None
        self._status = ListingStatus.LOADING_MORE
        self._in_flight = FetchTicket(
            generation=self._generation,
            prefix=self._prefix,
            continuation_token=self._continuation_token,
        )
        return self._in_flight

    def apply_page(self, ticket: FetchTicket, page: ListingPage) -> tuple[int, int]:
        """Merge ``page`` and return how many folders and files were added."""

        self._check_current(ticket)
        added_folders = 0
        for folder in page.folder_prefixes:
            if folder in self._folder_ids:
                continue
            self._folder_ids.add(folder)
            self._folders.append(folder)
            added_folders += 1

        added_files = 0
        for obj in page.object_items:
            # Directory marker for the folder itself.
            if obj.key == self._prefix:
                continue
            if obj.key in self._file_ids:
                continue
            self._file_ids.add(obj.key)
            self._files.append(obj)
            added_files += 1

        self._continuation_token = page.next_continuation_token
        self._exhausted = not page.is_truncated or not page.next_continuation_token
        self._pages_loaded += 1
        self._status = ListingStatus.READY
        self._in_flight = None
        return added_folders, added_files

    def apply_error(self, ticket: FetchTicket) -> ListingStatus:
        """Drop the failed fetch and return to the last stable status."""

        self._check_current(ticket)
        self._in_flight = None
        if self._status is ListingStatus.LOADING:
            self._status = ListingStatus.IDLE
        else:
            self._status = ListingStatus.READY
        return self._status

    def set_filter(self, query: str | None) -> None:
        self._query = query or ""

    def filtered_view(self) -> list[ListingEntry]:
        return filter_entries(self._folders, self._files, self._query)

    def _check_current(self, ticket: FetchTicket) -> None:
        if ticket is not self._in_flight:
            LOGGER.debug(
                "Discarding stale response for prefix '%s' (generation %d, current %d)",
                ticket.prefix,
                ticket.generation,
                self._generation,
            )
            raise StaleResponseDiscarded(ticket.prefix)

    def _reset(self, prefix: str) -> None:
        self._prefix = prefix
        self._status = ListingStatus.IDLE
        self._folders: list[str] = []
        self._files: list[ObjectRef] = []
        self._folder_ids: set[str] = set()
        self._file_ids: set[str] = set()
        self._continuation_token: str | None = None
        self._exhausted = False
        self._pages_loaded = 0
        self._in_flight: FetchTicket | None = None
