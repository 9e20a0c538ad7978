"""Runtime configuration.

Settings are resolved in three layers, later layers winning:

1. the dataclass defaults below,
2. an optional YAML file (``--config`` or ``CAMPUSVOICE_CONFIG``),
3. ``CAMPUSVOICE_*`` environment variables.

The Anthropic key is read from ``ANTHROPIC_API_KEY`` by the LLM client and is
never stored here.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "CAMPUSVOICE_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    """All tunables for the services, CLI and web app."""

    storage_backend: str = "memory"  # memory | json
    data_dir: str = str(Path.home() / ".campusvoice")

    abuse_ban_hours: int = 48
    cluster_overlap_threshold: float = 0.30
    session_hours: int = 24

    llm_enabled: bool = True
    llm_model: str = "claude-haiku-3-5-20241022"

    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"


def _coerce(raw: Any, current: Any) -> Any:
    """Convert a raw YAML/env value to the type of the current default."""
    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    if isinstance(current, list):
        if isinstance(raw, list):
            return [str(v) for v in raw]
        return [part.strip() for part in str(raw).split(",") if part.strip()]
    return str(raw)


def _apply(settings: Settings, values: Mapping[str, Any], source: str) -> None:
    known = {f.name for f in fields(settings)}
    for key, raw in values.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r from %s", key, source)
            continue
        try:
            setattr(settings, key, _coerce(raw, getattr(settings, key)))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid value for setting '{key}' from {source}: {raw!r}") from exc


def load_settings(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build a :class:`Settings` from defaults, a YAML file and the environment."""
    env = os.environ if environ is None else environ
    settings = Settings()

    config_path = path or env.get(f"{ENV_PREFIX}CONFIG")
    if config_path:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        _apply(settings, data, str(config_path))

    overrides = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in env.items()
        if key.startswith(ENV_PREFIX) and key != f"{ENV_PREFIX}CONFIG"
    }
    _apply(settings, overrides, "environment")

    if settings.storage_backend not in ("memory", "json"):
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    return settings


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and the web app."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
