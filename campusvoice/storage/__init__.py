"""Persistence: storage interface plus in-memory and JSON-file backends."""

from __future__ import annotations

from pathlib import Path

from campusvoice.config import Settings
from campusvoice.storage.base import Storage
from campusvoice.storage.json_store import JsonFileStorage
from campusvoice.storage.memory import MemoryStorage


def create_storage(settings: Settings) -> Storage:
    """Return the backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "json":
        return JsonFileStorage(Path(settings.data_dir) / "data")
    return MemoryStorage()


__all__ = ["JsonFileStorage", "MemoryStorage", "Storage", "create_storage"]
