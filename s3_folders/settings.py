from __future__ import annotations
"""Application settings persistence helpers."""

from dataclasses import asdict, dataclass
import json
from pathlib import Path

from .services import DEFAULT_REGION, MAX_PAGE_SIZE


@dataclass
class AppSettings:
    """Simple container for persistent app settings."""

    page_size: int = 200
    endpoint_url: str = ""
    region: str = DEFAULT_REGION
    connect_timeout: int = 10
    read_timeout: int = 30
    max_attempts: int = 3


_POSITIVE_INT_FIELDS = ("page_size", "connect_timeout", "read_timeout", "max_attempts")
_STRING_FIELDS = ("endpoint_url", "region")


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_folders_settings.json"
        self._path = Path(storage_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()

        defaults = AppSettings()
        values: dict[str, object] = {}
        for name in _POSITIVE_INT_FIELDS:
            values[name] = _positive_int(data.get(name), getattr(defaults, name))
        values["page_size"] = min(values["page_size"], MAX_PAGE_SIZE)
        for name in _STRING_FIELDS:
            raw = data.get(name)
            values[name] = raw if isinstance(raw, str) else getattr(defaults, name)
        if not values["region"]:
            values["region"] = DEFAULT_REGION
        return AppSettings(**values)

    def save(self, settings: AppSettings) -> None:
        payload = asdict(settings)
        for name in _POSITIVE_INT_FIELDS:
            payload[name] = max(int(payload[name]), 1)
        payload["page_size"] = min(payload["page_size"], MAX_PAGE_SIZE)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return
