from __future__ import annotations
"""UI-agnostic helpers for formatting listing entries."""
from dataclasses import dataclass
from datetime import datetime
from importlib.metadata import PackageNotFoundError, metadata, version

from .models import ListingEntry

DIST_NAME = "s3-folders"
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png"})
VIDEO_EXTENSIONS = frozenset({"mp4"})


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    summary: str


def load_package_info(dist_name: str = DIST_NAME) -> PackageInfo:
    try:
        distribution_metadata = metadata(dist_name)
        package_version = version(dist_name)
    except PackageNotFoundError:
        return PackageInfo(
            name="s3-folders",
            version="",
            summary="Browse S3 buckets folder by folder.",
        )
    return PackageInfo(
        name=distribution_metadata.get("Name"),
        version=package_version,
        summary=distribution_metadata.get("Summary") or "",
    )


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    suffixes = ["B", "KB", "MB", "GB", "TB"]
    value = float(max(size, 0))
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"


def format_last_modified(last_modified: object) -> str:
    if not last_modified:
        return "-"
    if isinstance(last_modified, datetime):
        return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or last_modified.isoformat()
    try:
        return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or str(last_modified)
    except AttributeError:
        return str(last_modified)


def entry_kind(entry: ListingEntry) -> str:
    """Return ``folder``, ``image``, ``video`` or ``file`` for display purposes."""

    if entry.is_folder:
        return "folder"
    _, dot, extension = entry.name.rpartition(".")
    extension = extension.lower() if dot else ""
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension in VIDEO_EXTENSIONS:
        return "video"
    return "file"


def format_entry_row(entry: ListingEntry) -> tuple[str, str, str, str]:
    """Return ``(kind, name, size, last_modified)`` columns for one entry."""

    kind = entry_kind(entry)
    if entry.obj is None:
        return (kind, f"{entry.name}/", "-", "-")
    tier = entry.obj.storage_tier
    name = f"{entry.name} [{tier.value}]" if tier.is_archived else entry.name
    return (
        kind,
        name,
        format_size(entry.obj.size),
        format_last_modified(entry.obj.last_modified),
    )
