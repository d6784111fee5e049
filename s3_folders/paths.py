from __future__ import annotations
"""Prefix helpers for walking a delimiter-based folder hierarchy."""

SEPARATOR = "/"


def normalize_prefix(value: str | None) -> str:
    """Return ``value`` as a folder prefix: no leading slash, one trailing slash.

    The bucket root is the empty string.
    """

    cleaned = (value or "").strip().lstrip(SEPARATOR)
    if cleaned and not cleaned.endswith(SEPARATOR):
        cleaned += SEPARATOR
    return cleaned


def child_prefix(parent_prefix: str, folder_prefix: str) -> str:
    # Common prefixes come back fully qualified from the service.
    return folder_prefix


def parent_prefix(prefix: str) -> str:
    if not prefix:
        return ""
    trimmed = prefix.rstrip(SEPARATOR)
    index = trimmed.rfind(SEPARATOR)
    if index < 0:
        return ""
    return trimmed[: index + 1]


def folder_display_name(prefix: str) -> str:
    segments = [segment for segment in prefix.split(SEPARATOR) if segment]
    return segments[-1] if segments else ""


def file_display_name(key: str) -> str:
    return key.rsplit(SEPARATOR, 1)[-1]


def breadcrumbs(prefix: str) -> list[tuple[str, str]]:
    """Return ``(label, prefix)`` pairs from the root down to ``prefix``."""

    crumbs = [("/", "")]
    current = ""
    for segment in prefix.split(SEPARATOR):
        if not segment:
            continue
        current = f"{current}{segment}{SEPARATOR}"
        crumbs.append((segment, current))
    return crumbs
