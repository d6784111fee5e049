from __future__ import annotations
"""Data models representing folder listings."""
from dataclasses import dataclass, field
from datetime import datetime
import enum
from typing import Optional


class StorageTier(enum.Enum):
    """S3 storage class reported for a listed object."""

    STANDARD = "STANDARD"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
    STANDARD_IA = "STANDARD_IA"
    ONEZONE_IA = "ONEZONE_IA"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    GLACIER = "GLACIER"
    GLACIER_IR = "GLACIER_IR"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"
    OUTPOSTS = "OUTPOSTS"
    EXPRESS_ONEZONE = "EXPRESS_ONEZONE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_value(cls, value: str | None) -> "StorageTier":
        # S3 omits the storage class for standard objects on some endpoints.
        if not value:
            return cls.STANDARD
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_archived(self) -> bool:
        return self in (StorageTier.GLACIER, StorageTier.DEEP_ARCHIVE)


class ListingStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOADING_MORE = "loading_more"


@dataclass(frozen=True)
class ObjectRef:
    """A leaf object returned by the listing service."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    storage_tier: StorageTier = StorageTier.STANDARD


@dataclass
class ListingPage:
    """One page of a delimiter listing."""

    folder_prefixes: list[str] = field(default_factory=list)
    object_items: list[ObjectRef] = field(default_factory=list)
    next_continuation_token: Optional[str] = None
    is_truncated: bool = False


@dataclass(frozen=True)
class ListingEntry:
    """A folder or file as shown in the filtered view."""

    kind: str
    identity: str
    name: str
    obj: Optional[ObjectRef] = None

    @property
    def is_folder(self) -> bool:
        return self.kind == "folder"
