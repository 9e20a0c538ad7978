"""File-based JSON storage.

Keeps the working set in memory and writes each changed collection back to
``<data_dir>/<collection>.json`` when a unit of work commits. Abuse logs are
an append-only newline-delimited JSON file, ``abuse_logs.jsonl``, that is never
rewritten.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from campusvoice.complaints.models import AbuseLog
from campusvoice.storage.memory import KINDS, MemoryStorage

logger = logging.getLogger(__name__)

_ABUSE_LOG_FILE = "abuse_logs.jsonl"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _record_to_dict(record: Any) -> dict:
    return json.loads(json.dumps(asdict(record), default=_json_default))


def _record_from_dict(cls: type, data: dict) -> Any:
    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if isinstance(value, str) and "datetime" in str(f.type):
            value = datetime.fromisoformat(value)
        kwargs[f.name] = value
    return cls(**kwargs)


class JsonFileStorage(MemoryStorage):
    """JSON-file storage under *base_dir* (default ``~/.campusvoice/data``)."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        super().__init__()
        self._base = Path(base_dir) if base_dir else Path.home() / ".campusvoice" / "data"
        self._base.mkdir(parents=True, exist_ok=True)
        self._pending_logs: list[AbuseLog] = []
        self._load()

    # -- loading -------------------------------------------------------------

    def _path(self, kind: str) -> Path:
        return self._base / f"{kind}.json"

    def _load(self) -> None:
        for kind, cls in KINDS.items():
            if kind == "abuse_logs":
                continue
            path = self._path(kind)
            if not path.exists():
                continue
            rows = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(rows, list):
                raise ValueError(f"{path} must contain a JSON list")
            self._data[kind] = {row["id"]: _record_from_dict(cls, row) for row in rows}

        log_path = self._base / _ABUSE_LOG_FILE
        if log_path.exists():
            for line in log_path.read_text(encoding="utf-8").splitlines():
                if line.strip():
                    log = _record_from_dict(AbuseLog, json.loads(line))
                    self._data["abuse_logs"][log.id] = log

        logger.debug("Loaded JSON storage from %s", self._base)

    # -- unit of work hooks --------------------------------------------------

    def _flush(self, kinds: set[str]) -> None:
        for kind in sorted(kinds):
            if kind == "abuse_logs":
                continue
            rows = [_record_to_dict(r) for r in self._data[kind].values()]
            self._path(kind).write_text(json.dumps(rows, indent=2), encoding="utf-8")

        if self._pending_logs:
            with (self._base / _ABUSE_LOG_FILE).open("a", encoding="utf-8") as fh:
                for log in self._pending_logs:
                    fh.write(json.dumps(_record_to_dict(log)) + "\n")
            self._pending_logs = []

    def _discard(self) -> None:
        self._pending_logs = []

    # -- abuse logs ----------------------------------------------------------

    def add_abuse_log(self, log: AbuseLog) -> AbuseLog:
        with self.transaction():
            self._pending_logs.append(log)
            return super().add_abuse_log(log)
